"""
Department domain model.
Departments form a tree through their optional parent reference.
"""

from dataclasses import dataclass
from typing import Optional

from taskhub.domain.models.base import BaseEntity, ValidationError


@dataclass(eq=False)
class Department(BaseEntity):
    """A node of the organisation's department tree."""

    name: str = ""
    parent_id: Optional[str] = None
    is_active: bool = True

    def validate(self) -> None:
        """Validate department state."""
        if not self.name or not self.name.strip():
            raise ValidationError("Department name is required", "name")
        if self.parent_id is not None and self.parent_id == self.id:
            raise ValidationError("Department cannot be its own parent", "parent_id")

    @property
    def is_root(self) -> bool:
        return self.parent_id is None
