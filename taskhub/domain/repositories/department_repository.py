"""
Department repository interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from taskhub.domain.models.department import Department


class DepartmentRepository(ABC):
    """
    Repository interface for Department entity.
    Read-only source of the department tree.
    """

    @abstractmethod
    async def find_by_id(self, department_id: str) -> Optional[Department]:
        """
        Find a department by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find_children(self, parent_id: str) -> List[Department]:
        """
        Find the direct children of a department, inactive ones included.
        """
        pass
