"""
Dashboard service.
Read-side aggregations of tasks for the personal, department and company
dashboards.
"""

import logging
from typing import List, Optional, Set

from taskhub.domain.models.base import AuthorizationError, NotFoundError
from taskhub.domain.models.task import Task, TaskStatus
from taskhub.domain.models.user import UserContext
from taskhub.domain.repositories.task_repository import TaskQuery, TaskRepository
from taskhub.domain.repositories.user_repository import UserRepository
from taskhub.domain.services.authorization_service import TaskAuthorizationPolicy
from taskhub.domain.services.hierarchy_service import DepartmentHierarchyService
from taskhub.application.dto.dashboard_dto import DashboardMetricsDTO, DashboardResponseDTO
from taskhub.application.dto.task_dto import TaskFilterDTO, TaskViewDTO


logger = logging.getLogger(__name__)


class DashboardService:
    """Builds dashboard task lists and their status metrics."""

    def __init__(
        self,
        task_repository: TaskRepository,
        hierarchy_service: DepartmentHierarchyService,
        user_repository: UserRepository,
    ):
        self.task_repository = task_repository
        self.hierarchy_service = hierarchy_service
        self.user_repository = user_repository
        self.policy = TaskAuthorizationPolicy

    async def get_personal_tasks(self, user_id: str) -> List[TaskViewDTO]:
        """Active tasks assigned to the user."""
        tasks, user, scope = await self._personal_tasks(user_id)
        return self._views(tasks, user, scope)

    async def get_personal_dashboard(self, user_id: str) -> DashboardResponseDTO:
        tasks, user, scope = await self._personal_tasks(user_id)
        return self._dashboard(tasks, user, scope)

    async def get_department_tasks(
        self,
        department_id: str,
        caller: UserContext,
        include_archived: bool = False,
    ) -> DashboardResponseDTO:
        """
        Tasks of a department and everything below it.

        Managers may only look at departments inside their own hierarchy,
        staff only at their home department.
        """
        scope = await self.hierarchy_service.authorization_scope(caller)

        if caller.is_hr_admin:
            departments = await self.hierarchy_service.subordinate_departments(department_id)
        elif caller.is_manager:
            if department_id not in scope:
                logger.warning(f"Manager {caller.id} denied dashboard of department {department_id}")
                raise AuthorizationError("Not authorized to view this department")
            departments = await self.hierarchy_service.subordinate_departments(department_id)
        else:
            if department_id != caller.department_id:
                logger.warning(f"User {caller.id} denied dashboard of department {department_id}")
                raise AuthorizationError("Not authorized to view this department")
            departments = {department_id}

        tasks = await self.task_repository.find_tasks(TaskQuery(
            department_ids=departments,
            include_archived=include_archived,
        ))
        tasks = [task for task in tasks if self.policy.can_view(caller, task, scope)]
        return self._dashboard(tasks, caller, scope)

    async def get_company_tasks(
        self,
        filters: Optional[TaskFilterDTO],
        caller: UserContext,
    ) -> List[TaskViewDTO]:
        """All tasks of the company. HR admins only."""
        tasks, scope = await self._company_tasks(filters, caller)
        return self._views(tasks, caller, scope)

    async def get_company_dashboard(
        self,
        filters: Optional[TaskFilterDTO],
        caller: UserContext,
    ) -> DashboardResponseDTO:
        tasks, scope = await self._company_tasks(filters, caller)
        return self._dashboard(tasks, caller, scope)

    async def _personal_tasks(self, user_id: str):
        profile = await self.user_repository.find_by_id(user_id)
        if profile is None:
            raise NotFoundError("User", user_id)
        user = profile.to_context()
        scope = await self.hierarchy_service.authorization_scope(user)
        tasks = await self.task_repository.find_tasks(TaskQuery(assignee_id=user_id))
        return tasks, user, scope

    async def _company_tasks(self, filters: Optional[TaskFilterDTO], caller: UserContext):
        if not caller.is_hr_admin:
            logger.warning(f"User {caller.id} denied company dashboard")
            raise AuthorizationError("Only HR admins can view company-wide tasks")

        filters = filters or TaskFilterDTO()
        tasks = await self.task_repository.find_tasks(TaskQuery(
            department_ids={filters.department_id} if filters.department_id else None,
            project_id=filters.project_id,
            assignee_id=filters.assignee_id,
            status=TaskStatus(filters.status) if filters.status else None,
            include_archived=filters.include_archived,
        ))
        scope = await self.hierarchy_service.authorization_scope(caller)
        return tasks, scope

    def _views(self, tasks: List[Task], user: UserContext, scope: Set[str]) -> List[TaskViewDTO]:
        return [
            TaskViewDTO.from_entity(task, can_edit=self.policy.can_edit(user, task, scope))
            for task in tasks
        ]

    def _dashboard(self, tasks: List[Task], user: UserContext, scope: Set[str]) -> DashboardResponseDTO:
        return DashboardResponseDTO(
            tasks=self._views(tasks, user, scope),
            metrics=DashboardMetricsDTO.from_tasks(tasks),
        )
