"""
Storage service for task attachments.
Keeps attachment bytes outside the task store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageService(ABC):
    """
    Storage service interface.
    Defines attachment operations used by the task service.
    """

    @abstractmethod
    def validate_upload(self,
                        filename: str,
                        content_type: Optional[str],
                        file_size: int,
                        current_task_total: int = 0) -> None:
        """
        Check type and size limits before upload.
        Raises ValidationError when the file is rejected.
        """
        pass

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Store the file at ``path`` and return the stored path.
        """
        pass

    @abstractmethod
    async def create_signed_url(self, path: str, expires_in: int) -> str:
        """
        Get a temporary download URL for a stored file.
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Remove a stored file.
        """
        pass
