"""
Task service.
Single entry point for task operations: validation, authorization,
domain mutation, persistence, audit logging and side effects.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from taskhub.config import Settings, get_settings
from taskhub.domain.events.base import EventDispatcher
from taskhub.domain.models.base import (
    AuthorizationError,
    ConflictError,
    DepthExceededError,
    NotFoundError,
    ValidationError,
    new_id,
)
from taskhub.domain.models.task import Task, TaskFile, TaskStatus
from taskhub.domain.models.task_log import TaskLogAction, TaskLogEntry
from taskhub.domain.models.user import UserContext
from taskhub.domain.repositories.task_repository import TaskQuery, TaskRepository
from taskhub.domain.services.authorization_service import TaskAuthorizationPolicy
from taskhub.domain.services.hierarchy_service import DepartmentHierarchyService
from taskhub.domain.services.recurrence_service import RecurrenceService
from taskhub.domain.services.storage_service import StorageService
from taskhub.application.dto.task_dto import (
    CreateTaskRequestDTO,
    CreateTaskResultDTO,
    TaskFileDTO,
    TaskFilterDTO,
    TaskLogDTO,
    TaskViewDTO,
)


logger = logging.getLogger(__name__)

LOG_SOURCE = "task_service"

# Field snapshots used to build the "changes" diff of UPDATED log entries
_TRACKED_FIELDS: Dict[str, Callable[[Task], Any]] = {
    "title": lambda task: task.title,
    "description": lambda task: task.description,
    "priority": lambda task: task.priority,
    "due_date": lambda task: task.due_date.isoformat() if task.due_date else None,
    "status": lambda task: task.status.value,
    "recurring_interval": lambda task: task.recurring_interval,
    "tags": lambda task: sorted(task.tags),
    "assignees": lambda task: sorted(task.assignee_ids),
    "comments": lambda task: {c.id: c.content for c in task.comments},
    "files": lambda task: sorted(f.id for f in task.files),
}


class TaskService:
    """
    Application service for tasks.

    Every operation authorizes and validates before it writes. Writes of one
    operation go through a single repository transaction; notifications are
    dispatched only after that transaction committed.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        hierarchy_service: DepartmentHierarchyService,
        storage_service: Optional[StorageService] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
        recurrence_service: Optional[RecurrenceService] = None,
        settings: Optional[Settings] = None,
    ):
        self.task_repository = task_repository
        self.hierarchy_service = hierarchy_service
        self.storage_service = storage_service
        self.event_dispatcher = event_dispatcher
        self.recurrence_service = recurrence_service or RecurrenceService()
        self.settings = settings or get_settings()
        self.policy = TaskAuthorizationPolicy

    # Creation

    async def create_task(self, request: CreateTaskRequestDTO, creator: UserContext) -> CreateTaskResultDTO:
        """
        Create a task or, when ``parent_task_id`` is given, a subtask.

        The department comes from the creator's profile; subtasks take the
        department and project of their parent instead.
        """
        task = Task.create(
            title=request.title,
            description=request.description,
            priority=request.priority,
            due_date=request.due_date,
            owner_id=creator.id,
            department_id=creator.department_id,
            assignee_ids=request.assignee_ids,
            project_id=request.project_id,
            parent_task_id=request.parent_task_id,
            recurring_interval=request.recurring_interval,
            tags=request.tags,
        )

        await self._check_assignees(task.assignee_ids)

        if request.project_id and not await self.task_repository.project_exists(request.project_id):
            raise NotFoundError("Project", request.project_id)

        if request.parent_task_id:
            parent = await self.task_repository.find_by_id(request.parent_task_id)
            if parent is None:
                raise NotFoundError("Task", request.parent_task_id)
            if parent.is_subtask:
                raise DepthExceededError()
            if not parent.is_assigned(creator.id):
                logger.warning(
                    f"User {creator.id} denied subtask creation under task {parent.id}"
                )
                raise AuthorizationError("Only assignees of the parent task can create subtasks")
            task.attach_to_parent(parent)

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log(task.id, creator.id, TaskLogAction.CREATED, {
                "title": task.title,
                "parent_task_id": task.parent_task_id,
                "source": LOG_SOURCE,
            })

        logger.info(f"Task {task.id} created by {creator.id} in department {task.department_id}")
        await self._publish_events(task)
        return CreateTaskResultDTO(id=task.id)

    # Queries

    async def get_by_id(self, task_id: str, caller: UserContext) -> Optional[TaskViewDTO]:
        """
        Get a task visible to ``caller``.
        Returns None if the task does not exist.
        """
        task = await self.task_repository.find_by_id(task_id)
        if task is None:
            return None

        scope = await self.hierarchy_service.authorization_scope(caller)
        if not self.policy.can_view(caller, task, scope):
            logger.warning(f"User {caller.id} denied view on task {task_id}")
            raise AuthorizationError()
        return self._to_view(task, caller, scope)

    async def get_visible_tasks(
        self,
        caller: UserContext,
        filters: Optional[TaskFilterDTO] = None,
    ) -> List[TaskViewDTO]:
        """
        List tasks the caller may view, each flagged with ``can_edit``.
        """
        filters = filters or TaskFilterDTO()
        scope = await self.hierarchy_service.authorization_scope(caller)
        query = _query_from_filters(filters)

        if caller.is_hr_admin:
            tasks = await self.task_repository.find_tasks(query)
        else:
            tasks = await self.task_repository.find_tasks(replace(query, participant_id=caller.id))
            if caller.is_manager:
                departments = set(scope)
                if query.department_ids is not None:
                    departments &= query.department_ids
                if departments:
                    tasks += await self.task_repository.find_tasks(
                        replace(query, department_ids=departments)
                    )
            tasks = _sort_tasks(_unique_tasks(tasks))

        return [
            self._to_view(task, caller, scope)
            for task in tasks
            if self.policy.can_view(caller, task, scope)
        ]

    async def get_subtasks(self, task_id: str, caller: UserContext) -> List[TaskViewDTO]:
        """List the subtasks of a task the caller may view."""
        task, scope = await self._load_viewable(task_id, caller)
        subtasks = await self.task_repository.find_subtasks(task.id)
        return [self._to_view(subtask, caller, scope) for subtask in _sort_tasks(subtasks)]

    async def get_task_logs(self, task_id: str, caller: UserContext) -> List[TaskLogDTO]:
        """Get the audit trail of a task."""
        task, _ = await self._load_viewable(task_id, caller)
        entries = await self.task_repository.find_logs(task.id)
        return [TaskLogDTO.from_entity(entry) for entry in entries]

    # Field updates

    async def update_title(self, task_id: str, title: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(task, caller, scope, "title", lambda: task.update_title(title))

    async def update_description(self, task_id: str, description: Optional[str], caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "description", lambda: task.update_description(description)
        )

    async def update_priority(self, task_id: str, priority: int, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "priority", lambda: task.update_priority(priority)
        )

    async def update_deadline(self, task_id: str, due_date: date, caller: UserContext) -> TaskViewDTO:
        """
        Change the due date.
        Subtasks stay on or before their parent, parents on or after their
        latest subtask.
        """
        task, scope = await self._load_editable(task_id, caller)

        parent_due_date = None
        latest_subtask_due_date = None
        if task.is_subtask:
            parent = await self.task_repository.find_by_id(task.parent_task_id)
            if parent is None:
                raise NotFoundError("Task", task.parent_task_id)
            parent_due_date = parent.due_date
        else:
            subtask_dates = [
                subtask.due_date
                for subtask in await self.task_repository.find_subtasks(task.id)
                if subtask.due_date is not None and not subtask.is_archived
            ]
            latest_subtask_due_date = max(subtask_dates) if subtask_dates else None

        return await self._commit_update(
            task, caller, scope, "due_date",
            lambda: task.update_deadline(due_date, parent_due_date, latest_subtask_due_date)
        )

    async def update_status(self, task_id: str, new_status: TaskStatus, caller: UserContext) -> TaskViewDTO:
        """
        Change the status.

        Completing a recurring task creates its successor in a second
        transaction. If that fails the completion stands and the failure is
        returned in ``warnings``.
        """
        task, scope = await self._load_editable(task_id, caller)
        changes = _Diff(task, "status")
        previous_status = task.update_status(new_status, changed_by=caller.id)

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log_update(task, caller, changes)

        view_warnings: List[str] = []
        successor_id = None
        if self.recurrence_service.should_generate(previous_status, task):
            try:
                successor = await self._generate_recurring_task(task, caller)
                successor_id = successor.id
            except Exception as exc:
                logger.error(f"Failed to generate recurring task for {task.id}: {exc}")
                view_warnings.append(f"Recurring task generation failed: {exc}")

        await self._publish_events(task)

        view = self._to_view(task, caller, scope)
        view.warnings = view_warnings
        view.next_recurring_task_id = successor_id
        return view

    async def update_recurring(
        self,
        task_id: str,
        enabled: bool,
        interval: Optional[int],
        caller: UserContext,
    ) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "recurring_interval",
            lambda: task.update_recurring(enabled, interval)
        )

    # Tags

    async def add_tag(self, task_id: str, tag: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(task, caller, scope, "tags", lambda: task.add_tag(tag))

    async def remove_tag(self, task_id: str, tag: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(task, caller, scope, "tags", lambda: task.remove_tag(tag))

    # Assignees

    async def add_assignee(self, task_id: str, user_id: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        if not task.is_assigned(user_id):
            await self._check_assignees([user_id])
        return await self._commit_update(
            task, caller, scope, "assignees", lambda: task.add_assignee(user_id, caller.id)
        )

    async def remove_assignee(self, task_id: str, user_id: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "assignees", lambda: task.remove_assignee(user_id, caller.id)
        )

    # Comments

    async def add_comment(self, task_id: str, content: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "comments", lambda: task.add_comment(caller.id, content)
        )

    async def update_comment(
        self,
        task_id: str,
        comment_id: str,
        content: str,
        caller: UserContext,
    ) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        return await self._commit_update(
            task, caller, scope, "comments",
            lambda: task.update_comment(comment_id, caller.id, content)
        )

    # Archival and deletion

    async def archive_task(self, task_id: str, caller: UserContext) -> TaskViewDTO:
        """
        Archive a task together with its subtasks.
        Only managers with edit rights on the task may archive it.
        """
        task = await self._load_task(task_id)
        scope = await self.hierarchy_service.authorization_scope(caller)
        if not self.policy.can_archive(caller, task, scope):
            logger.warning(f"User {caller.id} denied archive on task {task_id}")
            raise AuthorizationError()

        task.archive()
        subtasks = [s for s in await self.task_repository.find_subtasks(task.id) if not s.is_archived]

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log(task.id, caller.id, TaskLogAction.ARCHIVED, {"source": LOG_SOURCE})
            for subtask in subtasks:
                subtask.archive()
                await self.task_repository.save(subtask)
                await self._log(subtask.id, caller.id, TaskLogAction.ARCHIVED, {
                    "cascade_from_parent": task.id,
                    "source": LOG_SOURCE,
                })

        logger.info(f"Task {task.id} archived by {caller.id} with {len(subtasks)} subtask(s)")
        return self._to_view(task, caller, scope)

    async def unarchive_task(self, task_id: str, caller: UserContext) -> TaskViewDTO:
        task, scope = await self._load_editable(task_id, caller)
        task.unarchive()

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log(task.id, caller.id, TaskLogAction.UNARCHIVED, {"source": LOG_SOURCE})

        return self._to_view(task, caller, scope)

    async def delete_task(self, task_id: str, caller: UserContext) -> bool:
        """
        Permanently delete a task without subtasks.
        Archiving is the usual way to retire a task.
        """
        task = await self._load_task(task_id)
        scope = await self.hierarchy_service.authorization_scope(caller)
        if not self.policy.can_delete(caller, task, scope):
            logger.warning(f"User {caller.id} denied delete on task {task_id}")
            raise AuthorizationError()

        if await self.task_repository.find_subtasks(task.id):
            raise ConflictError("Cannot delete a task that has subtasks")

        async with self.task_repository.transaction():
            await self._log(task.id, caller.id, TaskLogAction.DELETED, {
                "title": task.title,
                "source": LOG_SOURCE,
            })
            deleted = await self.task_repository.delete(task.id)

        if self.storage_service:
            for task_file in task.files:
                await self._delete_stored_file(task_file.storage_path)
        return deleted

    # Attachments

    async def upload_file(
        self,
        task_id: str,
        content: bytes,
        filename: str,
        content_type: Optional[str],
        caller: UserContext,
    ) -> TaskFileDTO:
        """
        Store an attachment and record it on the task.
        The stored object is removed again if the task update fails.
        """
        storage = self._require_storage()
        task, _ = await self._load_editable(task_id, caller)
        storage.validate_upload(filename, content_type, len(content), task.total_file_size)

        file_id = new_id()
        stored_path = await storage.upload(
            f"tasks/{task.id}/{file_id}-{filename}", content, content_type
        )
        task_file = TaskFile(
            id=file_id,
            file_name=filename,
            file_size=len(content),
            file_type=content_type or "application/octet-stream",
            storage_path=stored_path,
            uploaded_by=caller.id,
        )

        changes = _Diff(task, "files")
        task.add_file(task_file)
        try:
            async with self.task_repository.transaction():
                await self.task_repository.save(task)
                await self._log_update(task, caller, changes)
        except Exception:
            await self._delete_stored_file(stored_path)
            raise

        return TaskFileDTO.from_entity(task_file)

    async def get_file_download_url(self, task_id: str, file_id: str, caller: UserContext) -> str:
        storage = self._require_storage()
        task, _ = await self._load_editable(task_id, caller)
        task_file = task.find_file(file_id)
        return await storage.create_signed_url(
            task_file.storage_path, self.settings.signed_url_expires_in
        )

    async def delete_file(self, task_id: str, file_id: str, caller: UserContext) -> None:
        self._require_storage()
        task, _ = await self._load_editable(task_id, caller)
        changes = _Diff(task, "files")
        task_file = task.remove_file(file_id)

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log_update(task, caller, changes)

        await self._delete_stored_file(task_file.storage_path)

    async def list_files(self, task_id: str, caller: UserContext) -> List[TaskFileDTO]:
        task, _ = await self._load_editable(task_id, caller)
        return [TaskFileDTO.from_entity(task_file) for task_file in task.files]

    # Helpers

    async def _load_task(self, task_id: str) -> Task:
        task = await self.task_repository.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def _load_viewable(self, task_id: str, caller: UserContext) -> Tuple[Task, Set[str]]:
        task = await self._load_task(task_id)
        scope = await self.hierarchy_service.authorization_scope(caller)
        if not self.policy.can_view(caller, task, scope):
            logger.warning(f"User {caller.id} denied view on task {task_id}")
            raise AuthorizationError()
        return task, scope

    async def _load_editable(self, task_id: str, caller: UserContext) -> Tuple[Task, Set[str]]:
        task = await self._load_task(task_id)
        scope = await self.hierarchy_service.authorization_scope(caller)
        if not self.policy.can_edit(caller, task, scope):
            logger.warning(f"User {caller.id} denied edit on task {task_id}")
            raise AuthorizationError()
        return task, scope

    async def _commit_update(
        self,
        task: Task,
        caller: UserContext,
        scope: Set[str],
        field_name: str,
        mutate: Callable[[], Any],
    ) -> TaskViewDTO:
        changes = _Diff(task, field_name)
        mutate()

        async with self.task_repository.transaction():
            await self.task_repository.save(task)
            await self._log_update(task, caller, changes)

        await self._publish_events(task)
        return self._to_view(task, caller, scope)

    async def _generate_recurring_task(self, task: Task, caller: UserContext) -> Task:
        await self._check_assignees(task.assignee_ids)
        successor = self.recurrence_service.generate_next(task)

        async with self.task_repository.transaction():
            await self.task_repository.save(successor)
            await self._log(task.id, caller.id, TaskLogAction.RECURRING_TASK_GENERATED, {
                "source_task_id": task.id,
                "next_task_id": successor.id,
                "next_due_date": successor.due_date.isoformat(),
                "source": LOG_SOURCE,
            })

        logger.info(
            f"Recurring task {successor.id} generated from {task.id}, due {successor.due_date}"
        )
        await self._publish_events(successor)
        return successor

    async def _check_assignees(self, user_ids: List[str]) -> None:
        result = await self.task_repository.validate_assignees(user_ids)
        if result.is_valid:
            return
        if result.missing:
            raise NotFoundError("User", ", ".join(result.missing))
        raise ValidationError(
            f"Inactive users cannot be assigned: {', '.join(result.inactive)}", "assignee_ids"
        )

    async def _log(self, task_id: str, user_id: str, action: TaskLogAction, metadata: Dict[str, Any]) -> None:
        await self.task_repository.log_action(TaskLogEntry(
            task_id=task_id,
            user_id=user_id,
            action=action,
            metadata=metadata,
        ))

    async def _log_update(self, task: Task, caller: UserContext, changes: "_Diff") -> None:
        diff = changes.compute(task)
        if diff:
            await self._log(task.id, caller.id, TaskLogAction.UPDATED, {
                "changes": diff,
                "source": LOG_SOURCE,
            })

    async def _publish_events(self, task: Task) -> None:
        events = task.pull_events()
        if not self.event_dispatcher:
            return
        for event in events:
            try:
                await self.event_dispatcher.dispatch(event)
            except Exception as exc:
                logger.error(f"Failed to dispatch {event.event_type} for task {task.id}: {exc}")

    async def _delete_stored_file(self, path: str) -> None:
        try:
            await self.storage_service.delete(path)
        except Exception as exc:
            logger.error(f"Failed to remove stored file {path}: {exc}")

    def _require_storage(self) -> StorageService:
        if self.storage_service is None:
            raise ValidationError("File storage is not configured")
        return self.storage_service

    def _to_view(self, task: Task, caller: UserContext, scope: Set[str]) -> TaskViewDTO:
        return TaskViewDTO.from_entity(task, can_edit=self.policy.can_edit(caller, task, scope))


class _Diff:
    """Captures a field before a mutation and reports the change after it."""

    def __init__(self, task: Task, field_name: str):
        self.field_name = field_name
        self._snapshot = _TRACKED_FIELDS[field_name]
        self.before = self._snapshot(task)

    def compute(self, task: Task) -> Dict[str, Dict[str, Any]]:
        after = self._snapshot(task)
        if after == self.before:
            return {}
        return {self.field_name: {"from": self.before, "to": after}}


def _query_from_filters(filters: TaskFilterDTO) -> TaskQuery:
    return TaskQuery(
        department_ids={filters.department_id} if filters.department_id else None,
        assignee_id=filters.assignee_id,
        project_id=filters.project_id,
        status=TaskStatus(filters.status) if filters.status else None,
        include_archived=filters.include_archived,
    )


def _unique_tasks(tasks: List[Task]) -> List[Task]:
    seen = {}
    for task in tasks:
        seen.setdefault(task.id, task)
    return list(seen.values())


def _sort_tasks(tasks: List[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: (t.due_date or date.max, t.created_at))
