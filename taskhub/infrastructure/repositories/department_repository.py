"""
Department repository implementation using SQLAlchemy.
"""

from typing import List, Optional
from sqlalchemy.orm import Session

from taskhub.domain.models.department import Department
from taskhub.domain.repositories.department_repository import DepartmentRepository
from taskhub.infrastructure.db.models import DepartmentModel
from taskhub.infrastructure.mappers.department_mapper import DepartmentMapper


class SQLAlchemyDepartmentRepository(DepartmentRepository):
    """SQLAlchemy implementation of department repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = DepartmentMapper()

    async def find_by_id(self, department_id: str) -> Optional[Department]:
        model = self.session.get(DepartmentModel, department_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def find_children(self, parent_id: str) -> List[Department]:
        models = self.session.query(DepartmentModel).filter(
            DepartmentModel.parent_id == parent_id
        ).order_by(DepartmentModel.name).all()
        return [self.mapper.model_to_domain(model) for model in models]

    def add(self, department: Department) -> Department:
        """Insert a department. Used for seeding and tests."""
        department.validate()
        self.session.add(self.mapper.domain_to_model(department))
        self.session.flush()
        return department
