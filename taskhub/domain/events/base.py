"""
Base classes for domain events and event handling.
Provides the foundation for event-driven notifications.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Type
from datetime import datetime
from dataclasses import dataclass, field
import uuid


logger = logging.getLogger(__name__)


@dataclass
class DomainEvent(ABC):
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=datetime.utcnow)
    event_type: str = field(init=False)
    version: int = field(default=1)

    def __post_init__(self):
        """Set event type based on class name."""
        if not hasattr(self, 'event_type') or not self.event_type:
            self.event_type = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data()
        }

    @abstractmethod
    def _get_event_data(self) -> Dict[str, Any]:
        """Get event-specific data for serialization."""
        pass


class EventHandler(ABC):
    """Base class for event handlers."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """Handle a domain event."""
        pass

    @abstractmethod
    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can process the given event."""
        pass


class EventDispatcher:
    """
    Dispatches domain events to registered handlers.

    Handlers are registered against an event class and receive every
    event that is an instance of it, so registering for a base class
    such as ``TaskEvent`` covers all of its subclasses.
    """

    def __init__(self):
        """Initialize event dispatcher."""
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def register_handler(self, event_class: Type[DomainEvent], handler: EventHandler) -> None:
        """Register an event handler for an event class and its subclasses."""
        self._handlers.setdefault(event_class, []).append(handler)
        logger.info(f"Registered handler {handler.__class__.__name__} for {event_class.__name__}")

    def register_global_handler(self, handler: EventHandler) -> None:
        """Register a handler that receives all events."""
        self._global_handlers.append(handler)
        logger.info(f"Registered global handler {handler.__class__.__name__}")

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        """Get the handlers that should receive an event, without duplicates."""
        selected: List[EventHandler] = []
        for event_class in type(event).__mro__:
            for handler in self._handlers.get(event_class, []):
                if handler not in selected:
                    selected.append(handler)
        for handler in self._global_handlers:
            if handler not in selected and handler.can_handle(event):
                selected.append(handler)
        return selected

    async def dispatch(self, event: DomainEvent) -> None:
        """Dispatch event to all registered handlers."""
        logger.info(f"Dispatching event: {event.event_type} (ID: {event.event_id})")

        handlers = self.handlers_for(event)
        if not handlers:
            logger.warning(f"No handlers registered for event: {event.event_type}")
            return

        await asyncio.gather(*(self._safe_handle(handler, event) for handler in handlers))

        logger.info(f"Dispatched {event.event_type} to {len(handlers)} handler(s)")

    async def _safe_handle(self, handler: EventHandler, event: DomainEvent) -> None:
        try:
            await handler.handle(event)
            logger.debug(f"Handler {handler.__class__.__name__} processed {event.event_type}")
        except Exception as e:
            logger.error(
                f"Handler {handler.__class__.__name__} failed to process "
                f"{event.event_type}: {str(e)}"
            )

    def get_registered_handlers(self) -> Dict[str, List[str]]:
        """Get handler class names keyed by event class name."""
        result = {
            event_class.__name__: [h.__class__.__name__ for h in handlers]
            for event_class, handlers in self._handlers.items()
        }
        if self._global_handlers:
            result["global"] = [h.__class__.__name__ for h in self._global_handlers]
        return result
