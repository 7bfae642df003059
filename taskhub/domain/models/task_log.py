"""
Task audit log entries.
Entries are append-only; business logic never edits or removes them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class TaskLogAction(str, Enum):
    """Kinds of actions recorded in the task log."""
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    ARCHIVED = "ARCHIVED"
    UNARCHIVED = "UNARCHIVED"
    RECURRING_TASK_GENERATED = "RECURRING_TASK_GENERATED"


@dataclass(frozen=True)
class TaskLogEntry:
    """Audit record for an action performed on a task."""

    task_id: str
    user_id: str
    action: TaskLogAction
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "user_id": self.user_id,
            "action": self.action.value,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }
