"""
User mapper for converting between domain entities and database models.
"""

from taskhub.domain.models.user import Role, UserProfile
from taskhub.infrastructure.db.models import UserProfileModel


class UserMapper:
    """Maps between UserProfile domain entity and UserProfileModel."""

    def domain_to_model(self, user: UserProfile) -> UserProfileModel:
        return UserProfileModel(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role.value,
            department_id=user.department_id,
            managed_department_id=user.managed_department_id,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def model_to_domain(self, model: UserProfileModel) -> UserProfile:
        return UserProfile(
            id=model.id,
            name=model.name,
            email=model.email,
            role=Role(model.role) if model.role else Role.STAFF,
            department_id=model.department_id,
            managed_department_id=model.managed_department_id,
            is_active=bool(model.is_active),
            created_at=model.created_at,
            updated_at=model.updated_at or model.created_at,
        )
