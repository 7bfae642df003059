"""
Dashboard DTOs for the application layer.
"""

from datetime import date
from typing import Iterable, List, Optional
from pydantic import Field

from taskhub.domain.models.task import Task, TaskStatus
from .base_dto import BaseDTO
from .task_dto import TaskViewDTO


class DashboardMetricsDTO(BaseDTO):
    """Task counts per status over a dashboard's task list."""

    to_do: int = Field(default=0, description="Tasks in TO_DO")
    in_progress: int = Field(default=0, description="Tasks in IN_PROGRESS")
    completed: int = Field(default=0, description="Tasks in COMPLETED")
    blocked: int = Field(default=0, description="Tasks in BLOCKED")
    overdue: int = Field(default=0, description="Open tasks past their due date")
    total: int = Field(default=0, description="Number of tasks")

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task], today: Optional[date] = None) -> "DashboardMetricsDTO":
        counts = {status: 0 for status in TaskStatus}
        overdue = 0
        total = 0
        for task in tasks:
            counts[task.status] += 1
            total += 1
            if task.is_overdue(today):
                overdue += 1

        return cls(
            to_do=counts[TaskStatus.TO_DO],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            completed=counts[TaskStatus.COMPLETED],
            blocked=counts[TaskStatus.BLOCKED],
            overdue=overdue,
            total=total,
        )


class DashboardResponseDTO(BaseDTO):
    """Tasks of a dashboard together with their metrics."""

    tasks: List[TaskViewDTO] = Field(default_factory=list, description="Visible tasks")
    metrics: DashboardMetricsDTO = Field(default_factory=DashboardMetricsDTO, description="Summary metrics")
