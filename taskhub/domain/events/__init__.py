"""
Domain events for the task management core.
"""

from .base import DomainEvent, EventHandler, EventDispatcher
from .task_events import (
    TaskEvent,
    TaskCreated,
    TaskStatusChanged,
    TaskAssigneeAdded,
    TaskAssigneeRemoved,
    TaskCommentAdded,
    TaskCommentUpdated,
)

__all__ = [
    "DomainEvent",
    "EventHandler",
    "EventDispatcher",
    "TaskEvent",
    "TaskCreated",
    "TaskStatusChanged",
    "TaskAssigneeAdded",
    "TaskAssigneeRemoved",
    "TaskCommentAdded",
    "TaskCommentUpdated",
]
