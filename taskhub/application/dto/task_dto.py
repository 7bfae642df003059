"""
Task DTOs for the application layer.
Data Transfer Objects for task-related operations.

Request DTOs only shape the input. Business validation happens in the
Task entity so there is a single place where task rules are enforced.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, date
from pydantic import Field

from taskhub.domain.models.task import Task, TaskStatus, TaskAssignment, TaskComment, TaskFile
from taskhub.domain.models.task_log import TaskLogEntry
from .base_dto import RequestDTO, ResponseDTO, CreateRequestDTO, TimestampMixin, TagsMixin


# Request DTOs
class CreateTaskRequestDTO(CreateRequestDTO, TagsMixin):
    """DTO for task creation requests."""

    title: str = Field(description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")
    priority: int = Field(default=5, description="Priority from 1 (low) to 10 (critical)")
    due_date: Optional[date] = Field(default=None, description="Task due date")
    assignee_ids: List[str] = Field(default_factory=list, description="Assigned user IDs")

    # Organization
    project_id: Optional[str] = Field(default=None, description="Project ID")
    parent_task_id: Optional[str] = Field(default=None, description="Parent task ID")
    recurring_interval: Optional[int] = Field(default=None, description="Recurrence interval in days")


class TaskFilterDTO(RequestDTO):
    """DTO for filtering task lists and dashboards."""

    department_id: Optional[str] = Field(default=None, description="Filter by department")
    project_id: Optional[str] = Field(default=None, description="Filter by project")
    assignee_id: Optional[str] = Field(default=None, description="Filter by assignee")
    status: Optional[TaskStatus] = Field(default=None, description="Filter by task status")
    include_archived: bool = Field(default=False, description="Include archived tasks")


# Nested DTOs
class TaskAssignmentDTO(ResponseDTO):
    """DTO for a task assignment in responses."""

    user_id: str = Field(description="Assigned user ID")
    assigned_by: str = Field(description="User ID who made the assignment")
    assigned_at: datetime = Field(description="Assignment timestamp")

    @classmethod
    def from_entity(cls, assignment: TaskAssignment) -> "TaskAssignmentDTO":
        return cls(
            user_id=assignment.user_id,
            assigned_by=assignment.assigned_by,
            assigned_at=assignment.assigned_at,
        )


class TaskCommentDTO(ResponseDTO, TimestampMixin):
    """DTO for task comment in responses."""

    author_id: str = Field(description="Comment author user ID")
    content: str = Field(description="Comment content")
    is_edited: bool = Field(description="Whether comment was edited")

    @classmethod
    def from_entity(cls, comment: TaskComment) -> "TaskCommentDTO":
        return cls(
            id=comment.id,
            author_id=comment.author_id,
            content=comment.content,
            is_edited=comment.is_edited,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class TaskFileDTO(ResponseDTO):
    """DTO for task attachment in responses."""

    file_name: str = Field(description="Attachment filename")
    file_size: int = Field(description="File size in bytes")
    file_type: str = Field(description="MIME type")
    uploaded_by: str = Field(description="User ID who uploaded the file")
    uploaded_at: datetime = Field(description="Upload timestamp")

    @classmethod
    def from_entity(cls, task_file: TaskFile) -> "TaskFileDTO":
        return cls(
            id=task_file.id,
            file_name=task_file.file_name,
            file_size=task_file.file_size,
            file_type=task_file.file_type,
            uploaded_by=task_file.uploaded_by,
            uploaded_at=task_file.uploaded_at,
        )


# Response DTOs
class CreateTaskResultDTO(ResponseDTO):
    """DTO returned by task creation."""

    id: str = Field(description="ID of the created task")


class TaskViewDTO(ResponseDTO, TimestampMixin, TagsMixin):
    """DTO for task response."""

    title: str = Field(description="Task title")
    description: str = Field(default="", description="Task description")
    priority: int = Field(description="Task priority")
    priority_label: str = Field(description="Priority bucket label")
    due_date: Optional[date] = Field(default=None, description="Task due date")
    status: TaskStatus = Field(description="Task status")

    # Ownership and placement
    owner_id: str = Field(description="Creator user ID")
    department_id: str = Field(description="Department ID")
    project_id: Optional[str] = Field(default=None, description="Project ID")
    parent_task_id: Optional[str] = Field(default=None, description="Parent task ID")

    # Lifecycle
    recurring_interval: Optional[int] = Field(default=None, description="Recurrence interval in days")
    is_archived: bool = Field(default=False, description="Whether the task is archived")
    start_date: Optional[date] = Field(default=None, description="First day of work")
    completed_at: Optional[datetime] = Field(default=None, description="Completion timestamp")

    # Collections
    assignee_ids: List[str] = Field(default_factory=list, description="Assigned user IDs")
    assignments: List[TaskAssignmentDTO] = Field(default_factory=list, description="Assignments")
    comments: List[TaskCommentDTO] = Field(default_factory=list, description="Comments")
    files: List[TaskFileDTO] = Field(default_factory=list, description="Attachments")

    # Caller specific
    can_edit: bool = Field(default=False, description="Whether the caller may edit the task")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal issues raised by the operation")
    next_recurring_task_id: Optional[str] = Field(default=None, description="Successor created by completion")

    @classmethod
    def from_entity(cls, task: Task, can_edit: bool = False) -> "TaskViewDTO":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            priority=task.priority,
            priority_label=task.priority_level.label.value,
            due_date=task.due_date,
            status=task.status,
            owner_id=task.owner_id,
            department_id=task.department_id,
            project_id=task.project_id,
            parent_task_id=task.parent_task_id,
            recurring_interval=task.recurring_interval,
            is_archived=task.is_archived,
            start_date=task.start_date,
            completed_at=task.completed_at,
            assignee_ids=task.assignee_ids,
            assignments=[TaskAssignmentDTO.from_entity(a) for a in task.assignments],
            tags=list(task.tags),
            comments=[TaskCommentDTO.from_entity(c) for c in task.comments],
            files=[TaskFileDTO.from_entity(f) for f in task.files],
            can_edit=can_edit,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TaskLogDTO(ResponseDTO):
    """DTO for task log entries."""

    id: Optional[int] = Field(default=None, description="Log entry ID")
    task_id: str = Field(description="Task ID")
    user_id: str = Field(description="Acting user ID")
    action: str = Field(description="Logged action")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Action details")
    created_at: datetime = Field(description="When the action happened")

    @classmethod
    def from_entity(cls, entry: TaskLogEntry) -> "TaskLogDTO":
        return cls(
            id=entry.id,
            task_id=entry.task_id,
            user_id=entry.user_id,
            action=entry.action.value,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )
