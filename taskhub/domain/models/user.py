"""
User domain model.
Holds the role and department data the authorization rules depend on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from taskhub.domain.models.base import BaseEntity


class Role(str, Enum):
    """Closed set of user roles."""
    STAFF = "STAFF"
    MANAGER = "MANAGER"
    HR_ADMIN = "HR_ADMIN"


@dataclass(frozen=True)
class UserContext:
    """
    Identity of the caller of a service operation.

    Managing a department is a capability independent of the role, so an
    HR_ADMIN who also runs a department keeps both.
    """

    id: str
    role: Role
    department_id: str
    managed_department_id: Optional[str] = None

    @property
    def manages_department(self) -> bool:
        return self.managed_department_id is not None

    @property
    def is_staff(self) -> bool:
        return self.role == Role.STAFF

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER

    @property
    def is_hr_admin(self) -> bool:
        return self.role == Role.HR_ADMIN


@dataclass(eq=False)
class UserProfile(BaseEntity):
    """User profile as stored by the user source."""

    name: str = ""
    email: str = ""
    role: Role = Role.STAFF
    department_id: str = ""
    managed_department_id: Optional[str] = None
    is_active: bool = True

    def to_context(self) -> UserContext:
        """Build the caller context used by services."""
        return UserContext(
            id=self.id,
            role=self.role,
            department_id=self.department_id,
            managed_department_id=self.managed_department_id,
        )
