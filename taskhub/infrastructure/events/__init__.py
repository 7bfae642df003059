"""
Infrastructure event handlers.
Handles domain events and triggers appropriate notifications.
"""

from .notification_handlers import (
    EventLoggingHandler,
    LoggingNotificationService,
    TaskNotificationHandler,
)
from .event_setup import setup_event_handlers, initialize_event_system

__all__ = [
    "EventLoggingHandler",
    "LoggingNotificationService",
    "TaskNotificationHandler",
    "setup_event_handlers",
    "initialize_event_system",
]
