"""
Infrastructure mappers module.
Contains mappers for converting between domain entities and database models.
"""

from .task_mapper import TaskMapper
from .department_mapper import DepartmentMapper
from .user_mapper import UserMapper

__all__ = [
    "TaskMapper",
    "DepartmentMapper",
    "UserMapper",
]
