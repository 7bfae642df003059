"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .task_repository import TaskRepository, TaskQuery, AssigneeValidation
from .department_repository import DepartmentRepository
from .user_repository import UserRepository

__all__ = [
    "TaskRepository",
    "TaskQuery",
    "AssigneeValidation",
    "DepartmentRepository",
    "UserRepository",
]
