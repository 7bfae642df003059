"""
Application services orchestrating the task domain.
"""

from .task_service import TaskService
from .dashboard_service import DashboardService

__all__ = [
    "TaskService",
    "DashboardService",
]
