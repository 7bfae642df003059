"""
Department mapper for converting between domain entities and database models.
"""

from taskhub.domain.models.department import Department
from taskhub.infrastructure.db.models import DepartmentModel


class DepartmentMapper:
    """Maps between Department domain entity and DepartmentModel."""

    def domain_to_model(self, department: Department) -> DepartmentModel:
        return DepartmentModel(
            id=department.id,
            name=department.name,
            parent_id=department.parent_id,
            is_active=department.is_active,
            created_at=department.created_at,
            updated_at=department.updated_at,
        )

    def model_to_domain(self, model: DepartmentModel) -> Department:
        return Department(
            id=model.id,
            name=model.name,
            parent_id=model.parent_id,
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at or model.created_at,
        )
