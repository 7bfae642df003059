"""
Data Transfer Objects for the application layer.
"""

from .base_dto import BaseDTO, RequestDTO, ResponseDTO, ErrorResponseDTO
from .task_dto import (
    CreateTaskRequestDTO,
    CreateTaskResultDTO,
    TaskFilterDTO,
    TaskViewDTO,
    TaskAssignmentDTO,
    TaskCommentDTO,
    TaskFileDTO,
    TaskLogDTO,
)
from .dashboard_dto import DashboardMetricsDTO, DashboardResponseDTO

__all__ = [
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "ErrorResponseDTO",
    "CreateTaskRequestDTO",
    "CreateTaskResultDTO",
    "TaskFilterDTO",
    "TaskViewDTO",
    "TaskAssignmentDTO",
    "TaskCommentDTO",
    "TaskFileDTO",
    "TaskLogDTO",
    "DashboardMetricsDTO",
    "DashboardResponseDTO",
]
