"""
Infrastructure repositories module.
Contains SQLAlchemy implementations of domain repositories.
"""

from .task_repository import SQLAlchemyTaskRepository
from .department_repository import SQLAlchemyDepartmentRepository
from .user_repository import SQLAlchemyUserRepository

__all__ = [
    "SQLAlchemyTaskRepository",
    "SQLAlchemyDepartmentRepository",
    "SQLAlchemyUserRepository",
]
