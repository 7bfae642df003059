"""Recurrence service.
Builds the next instance of a recurring task once the current one is completed.
"""

from datetime import timedelta
from typing import Optional

from taskhub.domain.models.base import ValidationError
from taskhub.domain.models.task import Task, TaskStatus


class RecurrenceService:
    """
    Domain service for recurring tasks.
    Pure: it builds the successor, persisting it is up to the caller.
    """

    @staticmethod
    def should_generate(previous_status: Optional[TaskStatus], task: Task) -> bool:
        """Only a genuine transition into COMPLETED spawns a successor."""
        return (
            task.is_recurring
            and task.status == TaskStatus.COMPLETED
            and previous_status != TaskStatus.COMPLETED
        )

    @staticmethod
    def next_due_date(task: Task):
        if not task.is_recurring:
            raise ValidationError("Task is not recurring", "recurring_interval")
        return task.due_date + timedelta(days=task.recurring_interval)

    def generate_next(self, task: Task) -> Task:
        """
        Create the successor of a completed recurring task.
        Comments, files and history stay with the original.
        """
        return Task.create(
            title=task.title,
            description=task.description,
            priority=task.priority,
            due_date=self.next_due_date(task),
            owner_id=task.owner_id,
            department_id=task.department_id,
            project_id=task.project_id,
            parent_task_id=task.parent_task_id,
            assignee_ids=task.assignee_ids,
            tags=list(task.tags),
            recurring_interval=task.recurring_interval,
            assigned_by=task.owner_id,
        )
