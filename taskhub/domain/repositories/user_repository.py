"""
User repository interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from taskhub.domain.models.user import UserProfile


class UserRepository(ABC):
    """Read access to user profiles."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[UserProfile]:
        """
        Find a user profile by ID.
        Returns None if not found.
        """
        pass
