"""
Task authorization policy.

Pure functions deciding whether a user may view or edit a task. The
department scope of the user is resolved beforehand by
``DepartmentHierarchyService.authorization_scope``.
"""

from typing import AbstractSet

from taskhub.domain.models.task import Task
from taskhub.domain.models.user import UserContext


class TaskAuthorizationPolicy:
    """Read and write rules for tasks."""

    @staticmethod
    def can_view(user: UserContext, task: Task, scope: AbstractSet[str]) -> bool:
        if user.is_hr_admin:
            return True
        if task.is_participant(user.id):
            return True
        if user.is_manager:
            return task.department_id in scope
        return False

    @staticmethod
    def can_edit(user: UserContext, task: Task, scope: AbstractSet[str]) -> bool:
        # HR admins see everything but only edit inside their own scope
        if user.is_hr_admin:
            return task.department_id in scope
        if task.is_participant(user.id):
            return True
        if user.is_manager:
            return task.department_id in scope
        return False

    @classmethod
    def can_archive(cls, user: UserContext, task: Task, scope: AbstractSet[str]) -> bool:
        return user.is_manager and cls.can_edit(user, task, scope)

    @classmethod
    def can_delete(cls, user: UserContext, task: Task, scope: AbstractSet[str]) -> bool:
        if not cls.can_edit(user, task, scope):
            return False
        return task.owner_id == user.id or user.is_manager
