"""
Domain services for the task management core.
This module exports all domain services for complex business logic.
"""

from .hierarchy_service import DepartmentHierarchyService
from .authorization_service import TaskAuthorizationPolicy
from .recurrence_service import RecurrenceService
from .storage_service import StorageService
from .notification_service import NotificationService

__all__ = [
    "DepartmentHierarchyService",
    "TaskAuthorizationPolicy",
    "RecurrenceService",
    "StorageService",
    "NotificationService",
]
