"""
Task repository implementation using SQLAlchemy.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from taskhub.domain.models.task import Task
from taskhub.domain.models.task_log import TaskLogEntry
from taskhub.domain.repositories.task_repository import (
    AssigneeValidation,
    TaskQuery,
    TaskRepository,
)
from taskhub.infrastructure.db.models import (
    ProjectModel,
    TagModel,
    TaskAssignmentModel,
    TaskLogModel,
    TaskModel,
    UserProfileModel,
)
from taskhub.infrastructure.mappers.task_mapper import TaskMapper


logger = logging.getLogger(__name__)


class SQLAlchemyTaskRepository(TaskRepository):
    """
    SQLAlchemy implementation of task repository.
    Uses a synchronous session behind the async interface.
    """

    def __init__(self, session: Session):
        self.session = session
        self.mapper = TaskMapper()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    async def save(self, task: Task) -> Task:
        """Save a task entity with its child collections."""
        model = self.session.get(TaskModel, task.id)
        if model is None:
            model = TaskModel(id=task.id)
            self.session.add(model)

        self.mapper.update_model(task, model, self._resolve_tags(task.tags))
        self.session.flush()
        return task

    async def find_by_id(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        model = self._base_query().filter(TaskModel.id == task_id).first()
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def find_subtasks(self, parent_task_id: str) -> List[Task]:
        return await self.find_tasks(TaskQuery(parent_task_id=parent_task_id, include_archived=True))

    async def find_tasks(self, query: TaskQuery) -> List[Task]:
        """Get tasks matching the query, ordered by due date."""
        q = self._base_query()

        if query.department_ids is not None:
            q = q.filter(TaskModel.department_id.in_(list(query.department_ids)))
        if query.assignee_id:
            q = q.filter(TaskModel.assignments.any(TaskAssignmentModel.user_id == query.assignee_id))
        if query.participant_id:
            q = q.filter(or_(
                TaskModel.owner_id == query.participant_id,
                TaskModel.assignments.any(TaskAssignmentModel.user_id == query.participant_id),
            ))
        if query.project_id:
            q = q.filter(TaskModel.project_id == query.project_id)
        if query.parent_task_id:
            q = q.filter(TaskModel.parent_task_id == query.parent_task_id)
        if query.status:
            q = q.filter(TaskModel.status == query.status.value)
        if not query.include_archived:
            q = q.filter(TaskModel.is_archived.is_(False))

        models = q.order_by(TaskModel.due_date, TaskModel.created_at).all()
        return [self.mapper.model_to_domain(model) for model in models]

    async def delete(self, task_id: str) -> bool:
        """Delete task by ID."""
        model = self.session.get(TaskModel, task_id)
        if not model:
            return False

        self.session.delete(model)
        self.session.flush()
        return True

    async def project_exists(self, project_id: str) -> bool:
        return self.session.query(ProjectModel.id).filter(
            ProjectModel.id == project_id
        ).first() is not None

    async def validate_assignees(self, user_ids: Iterable[str]) -> AssigneeValidation:
        user_ids = list(dict.fromkeys(user_ids))
        rows = self.session.query(UserProfileModel.id, UserProfileModel.is_active).filter(
            UserProfileModel.id.in_(user_ids)
        ).all()
        active = {row.id: bool(row.is_active) for row in rows}

        return AssigneeValidation(
            missing=[user_id for user_id in user_ids if user_id not in active],
            inactive=[user_id for user_id in user_ids if active.get(user_id) is False],
        )

    async def log_action(self, entry: TaskLogEntry) -> TaskLogEntry:
        model = self.mapper.log_to_model(entry)
        self.session.add(model)
        self.session.flush()
        return self.mapper.log_to_domain(model)

    async def find_logs(self, task_id: str) -> List[TaskLogEntry]:
        models = self.session.query(TaskLogModel).filter(
            TaskLogModel.task_id == task_id
        ).order_by(TaskLogModel.created_at, TaskLogModel.id).all()
        return [self.mapper.log_to_domain(model) for model in models]

    def _base_query(self):
        return self.session.query(TaskModel).options(
            selectinload(TaskModel.assignments),
            selectinload(TaskModel.tags),
            selectinload(TaskModel.comments),
            selectinload(TaskModel.files),
        )

    def _resolve_tags(self, names: List[str]) -> List[TagModel]:
        """Load tags by name, creating the missing ones."""
        if not names:
            return []

        found = {
            tag.name: tag
            for tag in self.session.query(TagModel).filter(TagModel.name.in_(names)).all()
        }
        for name in names:
            if name not in found:
                tag = TagModel(name=name)
                self.session.add(tag)
                found[name] = tag
                logger.debug(f"Created tag {name}")
        return [found[name] for name in names]
