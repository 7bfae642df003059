"""
Department hierarchy service.
Resolves the set of departments below a department.
"""

import logging
from collections import deque
from typing import Set

from taskhub.domain.models.user import UserContext
from taskhub.domain.repositories.department_repository import DepartmentRepository


logger = logging.getLogger(__name__)


class DepartmentHierarchyService:
    """
    Domain service for department tree lookups.
    Used by every visibility and edit check.
    """

    def __init__(self, department_repository: DepartmentRepository):
        self.department_repository = department_repository

    async def subordinate_departments(self, department_id: str) -> Set[str]:
        """
        Return ``department_id`` plus every active department below it,
        at any depth.
        """
        closure = {department_id}
        queue = deque([department_id])

        while queue:
            current = queue.popleft()
            for child in await self.department_repository.find_children(current):
                if not child.is_active:
                    continue
                if child.id in closure:
                    if child.id == department_id:
                        logger.warning(f"Department cycle detected through {child.id}")
                    continue
                closure.add(child.id)
                queue.append(child.id)

        return closure

    async def is_subordinate(self, root_id: str, department_id: str) -> bool:
        """Check whether ``department_id`` is ``root_id`` or below it."""
        return department_id in await self.subordinate_departments(root_id)

    async def authorization_scope(self, user: UserContext) -> Set[str]:
        """
        Departments in which ``user`` holds department-level rights.

        Staff have none. A manager covers the tree below the department
        they manage (their home department if none is recorded). An HR admin
        covers the tree of the department they manage, otherwise only their
        home department.
        """
        if user.is_staff:
            return set()
        if user.is_manager:
            return await self.subordinate_departments(
                user.managed_department_id or user.department_id
            )
        if user.is_hr_admin:
            if user.manages_department:
                return await self.subordinate_departments(user.managed_department_id)
            return {user.department_id}
        return set()
