"""
Task repository interface.
Defines the contract for task data persistence operations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncContextManager, Iterable, List, Optional, Set

from taskhub.domain.models.task import Task, TaskStatus
from taskhub.domain.models.task_log import TaskLogEntry


@dataclass
class TaskQuery:
    """
    Filters for bulk task queries.
    Every filter that is set must match. ``department_ids`` set to an empty
    collection matches nothing.
    """

    department_ids: Optional[Set[str]] = None
    assignee_id: Optional[str] = None
    participant_id: Optional[str] = None
    project_id: Optional[str] = None
    parent_task_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    include_archived: bool = False


@dataclass
class AssigneeValidation:
    """Outcome of checking a list of user ids against the user source."""

    missing: List[str] = field(default_factory=list)
    inactive: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.inactive


class TaskRepository(ABC):
    """
    Repository interface for Task aggregate.
    Defines all operations needed for task data persistence.
    """

    @abstractmethod
    async def save(self, task: Task) -> Task:
        """
        Save a task with its assignments, tags, comments and files.
        Creates the task if it does not exist yet.
        """
        pass

    @abstractmethod
    async def find_by_id(self, task_id: str) -> Optional[Task]:
        """
        Find a task by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find_subtasks(self, parent_task_id: str) -> List[Task]:
        """
        Find all subtasks of a task, archived ones included.
        """
        pass

    @abstractmethod
    async def find_tasks(self, query: TaskQuery) -> List[Task]:
        """
        Find tasks matching the query, ordered by due date.
        """
        pass

    @abstractmethod
    async def delete(self, task_id: str) -> bool:
        """
        Delete a task.
        Returns True if the task existed.
        """
        pass

    @abstractmethod
    async def project_exists(self, project_id: str) -> bool:
        """
        Check whether a project exists.
        """
        pass

    @abstractmethod
    async def validate_assignees(self, user_ids: Iterable[str]) -> AssigneeValidation:
        """
        Check that every user exists and is active.
        """
        pass

    @abstractmethod
    async def log_action(self, entry: TaskLogEntry) -> TaskLogEntry:
        """
        Append an entry to the task log.
        """
        pass

    @abstractmethod
    async def find_logs(self, task_id: str) -> List[TaskLogEntry]:
        """
        Get the log entries of a task, oldest first.
        """
        pass

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """
        Unit of work boundary.
        Writes inside the block are committed together on a clean exit and
        rolled back when the block raises.
        """
        pass
