"""
Notification service interface.
Delivery (email, push, in-app) is handled outside the core.
"""

from abc import ABC, abstractmethod
from typing import Optional


class NotificationService(ABC):
    """Sends a notification to a single user."""

    @abstractmethod
    async def notify(self,
                     user_id: str,
                     notification_type: str,
                     title: str,
                     message: str,
                     task_id: Optional[str] = None) -> None:
        """
        Deliver a notification. Failures may raise; callers log them.
        """
        pass
