"""
Task domain model.
Represents a departmental task or subtask with assignees, tags, comments,
attachments and an optional recurrence interval.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional, List, Iterable
from enum import Enum

from taskhub.domain.models.base import (
    AggregateRoot,
    AuthorizationError,
    ConflictError,
    DepthExceededError,
    NotFoundError,
    ValidationError,
    new_id,
)
from taskhub.domain.models.priority import Priority
from taskhub.domain.events.task_events import (
    TaskCreated,
    TaskStatusChanged,
    TaskAssigneeAdded,
    TaskAssigneeRemoved,
    TaskCommentAdded,
    TaskCommentUpdated,
)


MAX_TITLE_LENGTH = 255
MIN_ASSIGNEES = 1
MAX_ASSIGNEES = 5
MAX_TAG_LENGTH = 100


class TaskStatus(str, Enum):
    """Task workflow status."""
    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"


@dataclass
class TaskAssignment:
    """Link between a task and an assigned user."""

    user_id: str
    assigned_by: str
    assigned_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at.isoformat()
        }


@dataclass
class TaskComment:
    """Task comment."""

    author_id: str
    content: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def is_edited(self) -> bool:
        return self.updated_at is not None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "author_id": self.author_id,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None
        }


@dataclass
class TaskFile:
    """Attachment metadata. The bytes live in the storage service."""

    file_name: str
    file_size: int
    file_type: str
    storage_path: str
    uploaded_by: str
    id: str = field(default_factory=new_id)
    uploaded_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "file_type": self.file_type,
            "storage_path": self.storage_path,
            "uploaded_by": self.uploaded_by,
            "uploaded_at": self.uploaded_at.isoformat()
        }


@dataclass(eq=False)
class Task(AggregateRoot):
    """
    Task aggregate.

    Build new tasks with ``Task.create`` which rejects invalid input before
    an instance is handed out. The mutators validate only the invariant they
    touch; persisting the result is up to the caller.
    """

    title: str = ""
    description: str = ""
    priority: int = 5
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.TO_DO

    # Ownership and placement
    owner_id: str = ""
    department_id: str = ""
    project_id: Optional[str] = None
    parent_task_id: Optional[str] = None

    # Lifecycle
    recurring_interval: Optional[int] = None
    is_archived: bool = False
    start_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    # Collections
    assignments: List[TaskAssignment] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    comments: List[TaskComment] = field(default_factory=list)
    files: List[TaskFile] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        *,
        title: str,
        priority: int,
        due_date: Optional[date],
        owner_id: str,
        department_id: str,
        assignee_ids: Iterable[str],
        description: Optional[str] = None,
        project_id: Optional[str] = None,
        parent_task_id: Optional[str] = None,
        recurring_interval: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
        assigned_by: Optional[str] = None,
    ) -> "Task":
        """
        Create a new task.
        Raises ValidationError when any field breaks a task invariant.
        """
        if not owner_id:
            raise ValidationError("Owner is required", "owner_id")
        if not department_id:
            raise ValidationError("Department is required", "department_id")

        assignees = _unique(assignee_ids or [])
        if len(assignees) < MIN_ASSIGNEES:
            raise ValidationError(
                f"Task must have at least {MIN_ASSIGNEES} assignee", "assignee_ids"
            )
        if len(assignees) > MAX_ASSIGNEES:
            raise ValidationError(
                f"Task cannot have more than {MAX_ASSIGNEES} assignees", "assignee_ids"
            )

        assigner = assigned_by or owner_id
        now = datetime.utcnow()
        task = cls(
            title=_clean_title(title),
            description=description or "",
            priority=priority,
            due_date=_as_date(due_date),
            owner_id=owner_id,
            department_id=department_id,
            project_id=project_id,
            parent_task_id=parent_task_id,
            recurring_interval=recurring_interval,
            assignments=[TaskAssignment(user_id, assigner, now) for user_id in assignees],
            tags=_unique(_clean_tag(tag) for tag in (tags or [])),
            created_at=now,
            updated_at=now,
        )
        task.validate()

        task.add_event(TaskCreated(
            task_id=task.id,
            task_title=task.title,
            actor_id=owner_id,
            assignee_ids=task.assignee_ids,
            parent_task_id=parent_task_id,
        ))
        return task

    def validate(self) -> None:
        """Validate task state."""
        _clean_title(self.title)
        Priority(self.priority)

        if self.due_date is None:
            raise ValidationError("Due date is required", "due_date")

        if not MIN_ASSIGNEES <= len(self.assignments) <= MAX_ASSIGNEES:
            raise ValidationError(
                f"Task must have between {MIN_ASSIGNEES} and {MAX_ASSIGNEES} assignees",
                "assignee_ids"
            )

        _check_interval(self.recurring_interval)
        if self.is_subtask and self.recurring_interval is not None:
            raise ValidationError("Subtasks cannot be recurring", "recurring_interval")

    # Query helpers

    @property
    def is_subtask(self) -> bool:
        return self.parent_task_id is not None

    @property
    def is_recurring(self) -> bool:
        return self.recurring_interval is not None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def assignee_ids(self) -> List[str]:
        return [assignment.user_id for assignment in self.assignments]

    @property
    def priority_level(self) -> Priority:
        return Priority(self.priority)

    @property
    def total_file_size(self) -> int:
        return sum(task_file.file_size for task_file in self.files)

    def is_assigned(self, user_id: str) -> bool:
        return any(assignment.user_id == user_id for assignment in self.assignments)

    def is_participant(self, user_id: str) -> bool:
        """Creator or assignee."""
        return self.owner_id == user_id or self.is_assigned(user_id)

    def is_overdue(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return (
            self.due_date is not None
            and self.due_date < today
            and self.status != TaskStatus.COMPLETED
        )

    # Placement

    def attach_to_parent(self, parent: "Task") -> None:
        """
        Make this task a subtask of ``parent``.
        The subtask takes over the parent's department and project.
        """
        if parent.parent_task_id is not None:
            raise DepthExceededError()
        if self.recurring_interval is not None:
            raise ValidationError("Subtasks cannot be recurring", "recurring_interval")
        if parent.due_date is not None and self.due_date > parent.due_date:
            raise ValidationError(
                "Subtask due date cannot be after the parent task due date", "due_date"
            )

        self.parent_task_id = parent.id
        self.department_id = parent.department_id
        self.project_id = parent.project_id

    # Field mutators

    def update_title(self, title: str) -> "Task":
        self.title = _clean_title(title)
        self.mark_as_updated()
        return self

    def update_description(self, description: Optional[str]) -> "Task":
        self.description = description or ""
        self.mark_as_updated()
        return self

    def update_priority(self, priority: int) -> "Task":
        Priority(priority)
        self.priority = priority
        self.mark_as_updated()
        return self

    def update_deadline(
        self,
        due_date: date,
        parent_due_date: Optional[date] = None,
        latest_subtask_due_date: Optional[date] = None,
    ) -> "Task":
        """
        Change the due date.
        A subtask stays on or before its parent; a parent stays on or after
        its latest subtask.
        """
        due_date = _as_date(due_date)
        if due_date is None:
            raise ValidationError("Due date is required", "due_date")
        if parent_due_date is not None and due_date > parent_due_date:
            raise ValidationError(
                "Subtask due date cannot be after the parent task due date", "due_date"
            )
        if latest_subtask_due_date is not None and due_date < latest_subtask_due_date:
            raise ValidationError(
                "Due date cannot be earlier than a subtask's due date", "due_date"
            )

        self.due_date = due_date
        self.mark_as_updated()
        return self

    def update_status(self, new_status: TaskStatus, changed_by: Optional[str] = None) -> TaskStatus:
        """
        Move the task to ``new_status`` and return the previous status.
        Any transition is allowed.
        """
        new_status = _as_status(new_status)
        previous = self.status
        if new_status == previous:
            return previous

        self.status = new_status
        if new_status == TaskStatus.IN_PROGRESS and self.start_date is None:
            self.start_date = date.today()
        self.completed_at = datetime.utcnow() if new_status == TaskStatus.COMPLETED else None
        self.mark_as_updated()

        self.add_event(TaskStatusChanged(
            task_id=self.id,
            task_title=self.title,
            actor_id=changed_by or self.owner_id,
            old_status=previous.value,
            new_status=new_status.value,
            assignee_ids=self.assignee_ids,
        ))
        return previous

    def update_recurring(self, enabled: bool, interval: Optional[int] = None) -> "Task":
        """Enable recurrence with ``interval`` days, or disable it."""
        if not enabled:
            self.recurring_interval = None
        else:
            if self.is_subtask:
                raise ValidationError("Subtasks cannot be recurring", "recurring_interval")
            if interval is None:
                raise ValidationError(
                    "Recurring interval is required when recurrence is enabled",
                    "recurring_interval"
                )
            _check_interval(interval)
            self.recurring_interval = interval
        self.mark_as_updated()
        return self

    # Tags

    def add_tag(self, tag: str) -> "Task":
        tag = _clean_tag(tag)
        if tag not in self.tags:
            self.tags.append(tag)
            self.mark_as_updated()
        return self

    def remove_tag(self, tag: str) -> "Task":
        tag = (tag or "").strip()
        if tag in self.tags:
            self.tags.remove(tag)
            self.mark_as_updated()
        return self

    # Assignees

    def add_assignee(self, user_id: str, assigned_by: str) -> bool:
        """
        Assign ``user_id`` to the task.
        Returns False when the user was already assigned.
        """
        if not user_id:
            raise ValidationError("Assignee is required", "assignee_ids")
        if self.is_assigned(user_id):
            return False
        if len(self.assignments) >= MAX_ASSIGNEES:
            raise ValidationError(
                f"Task cannot have more than {MAX_ASSIGNEES} assignees", "assignee_ids"
            )

        self.assignments.append(TaskAssignment(user_id=user_id, assigned_by=assigned_by))
        self.mark_as_updated()
        self.add_event(TaskAssigneeAdded(
            task_id=self.id,
            task_title=self.title,
            actor_id=assigned_by,
            user_id=user_id,
            assignee_ids=self.assignee_ids,
        ))
        return True

    def remove_assignee(self, user_id: str, removed_by: Optional[str] = None) -> "Task":
        if not self.is_assigned(user_id):
            raise NotFoundError("TaskAssignment", user_id)
        if len(self.assignments) <= MIN_ASSIGNEES:
            raise ConflictError("Cannot remove the last assignee from a task")

        previous_assignees = self.assignee_ids
        self.assignments = [a for a in self.assignments if a.user_id != user_id]
        self.mark_as_updated()
        self.add_event(TaskAssigneeRemoved(
            task_id=self.id,
            task_title=self.title,
            actor_id=removed_by or self.owner_id,
            user_id=user_id,
            assignee_ids=previous_assignees,
        ))
        return self

    # Comments

    def add_comment(self, author_id: str, content: str) -> TaskComment:
        comment = TaskComment(author_id=author_id, content=_clean_comment(content))
        self.comments.append(comment)
        self.mark_as_updated()
        self.add_event(TaskCommentAdded(
            task_id=self.id,
            task_title=self.title,
            actor_id=author_id,
            comment_id=comment.id,
            assignee_ids=self.assignee_ids,
        ))
        return comment

    def find_comment(self, comment_id: str) -> TaskComment:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        raise NotFoundError("TaskComment", comment_id)

    def update_comment(self, comment_id: str, author_id: str, content: str) -> TaskComment:
        comment = self.find_comment(comment_id)
        if comment.author_id != author_id:
            raise AuthorizationError("Only the comment author can edit this comment")

        comment.content = _clean_comment(content)
        comment.updated_at = datetime.utcnow()
        self.mark_as_updated()
        self.add_event(TaskCommentUpdated(
            task_id=self.id,
            task_title=self.title,
            actor_id=author_id,
            comment_id=comment.id,
            assignee_ids=self.assignee_ids,
        ))
        return comment

    # Archival

    def archive(self) -> "Task":
        if self.is_archived:
            raise ConflictError("Task is already archived")
        self.is_archived = True
        self.mark_as_updated()
        return self

    def unarchive(self) -> "Task":
        if not self.is_archived:
            raise ConflictError("Task is not archived")
        self.is_archived = False
        self.mark_as_updated()
        return self

    # Attachments

    def add_file(self, task_file: TaskFile) -> TaskFile:
        self.files.append(task_file)
        self.mark_as_updated()
        return task_file

    def find_file(self, file_id: str) -> TaskFile:
        for task_file in self.files:
            if task_file.id == file_id:
                return task_file
        raise NotFoundError("TaskFile", file_id)

    def remove_file(self, file_id: str) -> TaskFile:
        task_file = self.find_file(file_id)
        self.files.remove(task_file)
        self.mark_as_updated()
        return task_file


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(value for value in values if value))


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_status(value) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid task status: {value}", "status")


def _clean_title(title: str) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Task title is required", "title")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Task title too long (max {MAX_TITLE_LENGTH} characters)", "title"
        )
    return title


def _clean_tag(tag: str) -> str:
    if not isinstance(tag, str) or not tag.strip():
        raise ValidationError("Tag name cannot be empty", "tags")
    tag = tag.strip()
    if len(tag) > MAX_TAG_LENGTH:
        raise ValidationError(f"Tag too long (max {MAX_TAG_LENGTH} characters)", "tags")
    return tag


def _clean_comment(content: str) -> str:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Comment content cannot be empty", "content")
    return content.strip()


def _check_interval(interval: Optional[int]) -> None:
    if interval is None:
        return
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise ValidationError(
            "Recurring interval must be a positive number of days", "recurring_interval"
        )
