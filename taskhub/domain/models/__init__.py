"""
Domain models for the task management core.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainException,
    ValidationError,
    DepthExceededError,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    AuthorizationError,
    ValueObject,
)

# Value Objects
from .priority import Priority, PriorityLabel

# Entities
from .department import Department
from .user import Role, UserContext, UserProfile
from .task import Task, TaskStatus, TaskAssignment, TaskComment, TaskFile
from .task_log import TaskLogEntry, TaskLogAction

__all__ = [
    # Base
    "BaseEntity",
    "AggregateRoot",
    "DomainException",
    "ValidationError",
    "DepthExceededError",
    "BusinessRuleViolation",
    "ConflictError",
    "NotFoundError",
    "AuthorizationError",
    "ValueObject",

    # Value Objects
    "Priority",
    "PriorityLabel",

    # Entities
    "Department",
    "Role",
    "UserContext",
    "UserProfile",
    "Task",
    "TaskStatus",
    "TaskAssignment",
    "TaskComment",
    "TaskFile",
    "TaskLogEntry",
    "TaskLogAction",
]
