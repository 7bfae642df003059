"""
Event system setup and configuration.
Registers all event handlers with the event dispatcher.
"""

import logging
from typing import Optional

from taskhub.domain.events.base import EventDispatcher
from taskhub.domain.events.task_events import TaskEvent
from taskhub.domain.services.notification_service import NotificationService
from .notification_handlers import (
    EventLoggingHandler,
    LoggingNotificationService,
    TaskNotificationHandler,
)

logger = logging.getLogger(__name__)


def setup_event_handlers(dispatcher: EventDispatcher,
                         notification_service: Optional[NotificationService] = None) -> EventDispatcher:
    """Set up and register all event handlers."""

    notification_service = notification_service or LoggingNotificationService()

    # Global handler for logging
    dispatcher.register_global_handler(EventLoggingHandler())

    dispatcher.register_handler(TaskEvent, TaskNotificationHandler(notification_service))

    logger.info("Event handlers registered successfully")

    registered = dispatcher.get_registered_handlers()
    for event_type, handlers in registered.items():
        logger.info(f"Event {event_type}: {', '.join(handlers)} handlers")

    return dispatcher


def initialize_event_system(notification_service: Optional[NotificationService] = None) -> EventDispatcher:
    """Create a dispatcher with all handlers registered."""
    try:
        dispatcher = setup_event_handlers(EventDispatcher(), notification_service)
        logger.info("Event system initialized successfully")
        return dispatcher
    except Exception as e:
        logger.error(f"Failed to initialize event system: {str(e)}")
        raise
