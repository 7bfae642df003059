"""
User repository implementation using SQLAlchemy.
"""

from typing import Optional
from sqlalchemy.orm import Session

from taskhub.domain.models.user import UserProfile
from taskhub.domain.repositories.user_repository import UserRepository
from taskhub.infrastructure.db.models import UserProfileModel
from taskhub.infrastructure.mappers.user_mapper import UserMapper


class SQLAlchemyUserRepository(UserRepository):
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = UserMapper()

    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        model = self.session.get(UserProfileModel, user_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    def add(self, user: UserProfile) -> UserProfile:
        """Insert a user profile. Used for seeding and tests."""
        self.session.add(self.mapper.domain_to_model(user))
        self.session.flush()
        return user
