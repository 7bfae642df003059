"""
Task mapper for converting between domain entities and database models.
"""

from typing import Dict, List

from taskhub.domain.models.task import (
    Task, TaskStatus, TaskAssignment, TaskComment, TaskFile
)
from taskhub.domain.models.task_log import TaskLogAction, TaskLogEntry
from taskhub.infrastructure.db.models import (
    TaskModel,
    TaskAssignmentModel,
    TaskCommentModel,
    TaskFileModel,
    TaskLogModel,
    TagModel,
)


class TaskMapper:
    """Maps between Task domain entity and TaskModel database model."""

    def update_model(self, task: Task, model: TaskModel, tags: List[TagModel]) -> TaskModel:
        """
        Copy the state of ``task`` onto ``model``.
        Child rows are matched by key so unchanged rows are left in place.
        """
        model.id = task.id
        model.title = task.title
        model.description = task.description
        model.priority = task.priority
        model.due_date = task.due_date
        model.status = task.status.value
        model.owner_id = task.owner_id
        model.department_id = task.department_id
        model.project_id = task.project_id
        model.parent_task_id = task.parent_task_id
        model.recurring_interval = task.recurring_interval
        model.is_archived = task.is_archived
        model.start_date = task.start_date
        model.completed_at = task.completed_at
        model.created_at = task.created_at
        model.updated_at = task.updated_at
        model.tags = tags

        self._sync_assignments(task, model)
        self._sync_comments(task, model)
        self._sync_files(task, model)
        return model

    def model_to_domain(self, model: TaskModel) -> Task:
        """Convert TaskModel to Task domain entity."""
        return Task(
            id=model.id,
            title=model.title,
            description=model.description or "",
            priority=model.priority,
            due_date=model.due_date,
            status=TaskStatus(model.status) if model.status else TaskStatus.TO_DO,
            owner_id=model.owner_id,
            department_id=model.department_id,
            project_id=model.project_id,
            parent_task_id=model.parent_task_id,
            recurring_interval=model.recurring_interval,
            is_archived=bool(model.is_archived),
            start_date=model.start_date,
            completed_at=model.completed_at,
            created_at=model.created_at,
            updated_at=model.updated_at or model.created_at,
            assignments=[
                TaskAssignment(
                    user_id=a.user_id,
                    assigned_by=a.assigned_by,
                    assigned_at=a.assigned_at,
                )
                for a in sorted(model.assignments, key=lambda a: (a.assigned_at, a.user_id))
            ],
            tags=sorted(tag.name for tag in model.tags),
            comments=[
                TaskComment(
                    id=c.id,
                    author_id=c.author_id,
                    content=c.content,
                    created_at=c.created_at,
                    updated_at=c.updated_at,
                )
                for c in model.comments
            ],
            files=[
                TaskFile(
                    id=f.id,
                    file_name=f.file_name,
                    file_size=f.file_size,
                    file_type=f.file_type,
                    storage_path=f.storage_path,
                    uploaded_by=f.uploaded_by,
                    uploaded_at=f.uploaded_at,
                )
                for f in model.files
            ],
        )

    def log_to_model(self, entry: TaskLogEntry) -> TaskLogModel:
        return TaskLogModel(
            task_id=entry.task_id,
            user_id=entry.user_id,
            action=entry.action.value,
            log_metadata=entry.metadata,
            created_at=entry.created_at,
        )

    def log_to_domain(self, model: TaskLogModel) -> TaskLogEntry:
        return TaskLogEntry(
            id=model.id,
            task_id=model.task_id,
            user_id=model.user_id,
            action=TaskLogAction(model.action),
            metadata=model.log_metadata or {},
            created_at=model.created_at,
        )

    def _sync_assignments(self, task: Task, model: TaskModel) -> None:
        existing: Dict[str, TaskAssignmentModel] = {a.user_id: a for a in model.assignments}
        wanted = {a.user_id: a for a in task.assignments}

        for user_id, row in existing.items():
            if user_id not in wanted:
                model.assignments.remove(row)
        for user_id, assignment in wanted.items():
            if user_id not in existing:
                model.assignments.append(TaskAssignmentModel(
                    user_id=assignment.user_id,
                    assigned_by=assignment.assigned_by,
                    assigned_at=assignment.assigned_at,
                ))

    def _sync_comments(self, task: Task, model: TaskModel) -> None:
        existing: Dict[str, TaskCommentModel] = {c.id: c for c in model.comments}
        wanted = {c.id: c for c in task.comments}

        for comment_id, row in existing.items():
            if comment_id not in wanted:
                model.comments.remove(row)
        for comment_id, comment in wanted.items():
            row = existing.get(comment_id)
            if row is None:
                model.comments.append(TaskCommentModel(
                    id=comment.id,
                    author_id=comment.author_id,
                    content=comment.content,
                    created_at=comment.created_at,
                    updated_at=comment.updated_at,
                ))
            else:
                row.content = comment.content
                row.updated_at = comment.updated_at

    def _sync_files(self, task: Task, model: TaskModel) -> None:
        existing: Dict[str, TaskFileModel] = {f.id: f for f in model.files}
        wanted = {f.id: f for f in task.files}

        for file_id, row in existing.items():
            if file_id not in wanted:
                model.files.remove(row)
        for file_id, task_file in wanted.items():
            if file_id not in existing:
                model.files.append(TaskFileModel(
                    id=task_file.id,
                    file_name=task_file.file_name,
                    file_size=task_file.file_size,
                    file_type=task_file.file_type,
                    storage_path=task_file.storage_path,
                    uploaded_by=task_file.uploaded_by,
                    uploaded_at=task_file.uploaded_at,
                ))
