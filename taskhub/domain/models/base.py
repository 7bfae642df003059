"""
Base entity and value objects for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, date
from typing import Optional, Any, Dict
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import uuid

from taskhub.domain.events.base import DomainEvent


def new_id() -> str:
    """Generate a new entity identifier."""
    return str(uuid.uuid4())


@dataclass(eq=False)
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        """Initialize entity after creation."""
        if self.created_at is None:
            self.created_at = datetime.utcnow()
        if self.updated_at is None:
            self.updated_at = datetime.utcnow()

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.utcnow()

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary representation."""
        data = {}
        for key, value in self.__dict__.items():
            if not key.startswith('_'):
                data[key] = _serialize(value)
        return data


def _serialize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseEntity) or hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    return value


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.
    Aggregate roots are the entry points to aggregates and handle domain events.
    """

    _events: list[DomainEvent] = field(default_factory=list, init=False, repr=False)

    def add_event(self, event: DomainEvent) -> None:
        """Record a domain event to publish after the next save."""
        self._events.append(event)

    def pull_events(self) -> list[DomainEvent]:
        """Get and clear all domain events."""
        events = self._events.copy()
        self._events.clear()
        return events


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code)
        self.field = field


class DepthExceededError(ValidationError):
    """Exception raised when a subtask would get subtasks of its own."""

    def __init__(self, message: str = "Subtasks cannot have their own subtasks (maximum depth is 2)"):
        super().__init__(message, "parent_task_id", "DEPTH_EXCEEDED")


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    def __init__(self, message: str, code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(message, code)


class ConflictError(BusinessRuleViolation):
    """Exception raised when an operation conflicts with the current state."""

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class NotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class AuthorizationError(DomainException):
    """Exception raised when the caller may not perform an operation."""

    DEFAULT_MESSAGE = "Not authorized to access this task"

    def __init__(self, message: str = DEFAULT_MESSAGE):
        super().__init__(message, "AUTHORIZATION_ERROR")


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    @abstractmethod
    def validate(self) -> None:
        """Validate the value object's state."""
        pass
