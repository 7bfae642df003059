"""
Domain events related to tasks.
Events for task lifecycle, assignment and collaboration changes.
"""

from typing import Dict, Any, Iterable, List, Optional

from .base import DomainEvent


class TaskEvent(DomainEvent):
    """
    Base class for task events.
    Carries a snapshot of the task's assignees so handlers can address
    notifications without reloading the task.
    """

    notification_type: str = "TASK_UPDATED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 assignee_ids: Iterable[str] = (),
                 **kwargs):
        super().__init__(**kwargs)
        self.task_id = task_id
        self.task_title = task_title
        self.actor_id = actor_id
        self.assignee_ids = sorted(set(assignee_ids))

    @property
    def recipient_ids(self) -> List[str]:
        """Assignees other than the user who triggered the event."""
        return [user_id for user_id in self.assignee_ids if user_id != self.actor_id]

    def describe(self) -> str:
        """Human readable message used for notifications."""
        return f"Task '{self.task_title}' was updated"

    def _get_event_data(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "task_title": self.task_title,
            "actor_id": self.actor_id,
            "assignee_ids": list(self.assignee_ids),
        }


class TaskCreated(TaskEvent):
    """Event fired when a new task is created."""

    notification_type = "TASK_ASSIGNED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 assignee_ids: Iterable[str] = (),
                 parent_task_id: Optional[str] = None,
                 **kwargs):
        super().__init__(task_id, task_title, actor_id, assignee_ids, **kwargs)
        self.parent_task_id = parent_task_id

    def describe(self) -> str:
        return f"You have been assigned to task '{self.task_title}'"

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data["parent_task_id"] = self.parent_task_id
        return data


class TaskStatusChanged(TaskEvent):
    """Event fired when a task moves to another status."""

    notification_type = "STATUS_CHANGED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 old_status: str,
                 new_status: str,
                 assignee_ids: Iterable[str] = (),
                 **kwargs):
        super().__init__(task_id, task_title, actor_id, assignee_ids, **kwargs)
        self.old_status = old_status
        self.new_status = new_status

    def describe(self) -> str:
        return f"Task '{self.task_title}' moved from {self.old_status} to {self.new_status}"

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data.update({"old_status": self.old_status, "new_status": self.new_status})
        return data


class TaskAssigneeAdded(TaskEvent):
    """Event fired when a user is assigned to a task."""

    notification_type = "ASSIGNEE_ADDED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 user_id: str,
                 assignee_ids: Iterable[str] = (),
                 **kwargs):
        super().__init__(task_id, task_title, actor_id, assignee_ids, **kwargs)
        self.user_id = user_id

    def describe(self) -> str:
        return f"A new assignee was added to task '{self.task_title}'"

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data["user_id"] = self.user_id
        return data


class TaskAssigneeRemoved(TaskEvent):
    """Event fired when a user is unassigned from a task."""

    notification_type = "ASSIGNEE_REMOVED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 user_id: str,
                 assignee_ids: Iterable[str] = (),
                 **kwargs):
        super().__init__(task_id, task_title, actor_id, assignee_ids, **kwargs)
        self.user_id = user_id

    def describe(self) -> str:
        return f"An assignee was removed from task '{self.task_title}'"

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data["user_id"] = self.user_id
        return data


class TaskCommentAdded(TaskEvent):
    """Event fired when a comment is posted on a task."""

    notification_type = "COMMENT_ADDED"

    def __init__(self,
                 task_id: str,
                 task_title: str,
                 actor_id: str,
                 comment_id: str,
                 assignee_ids: Iterable[str] = (),
                 **kwargs):
        super().__init__(task_id, task_title, actor_id, assignee_ids, **kwargs)
        self.comment_id = comment_id

    def describe(self) -> str:
        return f"New comment on task '{self.task_title}'"

    def _get_event_data(self) -> Dict[str, Any]:
        data = super()._get_event_data()
        data["comment_id"] = self.comment_id
        return data


class TaskCommentUpdated(TaskCommentAdded):
    """Event fired when a comment is edited by its author."""

    notification_type = "COMMENT_UPDATED"

    def describe(self) -> str:
        return f"A comment was edited on task '{self.task_title}'"
