"""
Event handlers for task notifications.
Converts task domain events into per-user notifications.
"""

import logging
from typing import Optional

from taskhub.domain.events.base import EventHandler, DomainEvent
from taskhub.domain.events.task_events import TaskEvent
from taskhub.domain.services.notification_service import NotificationService


logger = logging.getLogger(__name__)


class EventLoggingHandler(EventHandler):
    """Global handler that logs every event."""

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    async def handle(self, event: DomainEvent) -> None:
        logger.info(f"Event received: {event.event_type} (ID: {event.event_id})")


class TaskNotificationHandler(EventHandler):
    """Handler that notifies the assignees of a task about changes."""

    def __init__(self, notification_service: NotificationService):
        """Initialize task notification handler."""
        self.notification_service = notification_service

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can process task events."""
        return isinstance(event, TaskEvent)

    async def handle(self, event: DomainEvent) -> None:
        """Send a notification to every assignee except the actor."""
        if not self.can_handle(event):
            return

        recipients = event.recipient_ids
        if not recipients:
            logger.debug(f"No recipients for {event.event_type} on task {event.task_id}")
            return

        message = event.describe()
        for user_id in recipients:
            try:
                await self.notification_service.notify(
                    user_id=user_id,
                    notification_type=event.notification_type,
                    title=event.task_title,
                    message=message,
                    task_id=event.task_id
                )
            except Exception as e:
                logger.error(
                    f"Failed to notify user {user_id} about {event.event_type} "
                    f"for task {event.task_id}: {str(e)}"
                )

        logger.info(f"Sent {event.notification_type} notifications to {len(recipients)} user(s)")


class LoggingNotificationService(NotificationService):
    """Notification service that only writes to the log."""

    async def notify(self,
                     user_id: str,
                     notification_type: str,
                     title: str,
                     message: str,
                     task_id: Optional[str] = None) -> None:
        logger.info(f"[{notification_type}] to {user_id}: {title} - {message}")
