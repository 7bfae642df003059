"""
Supabase Storage service for task attachments.
Validates uploads against the configured limits and stores the bytes in a
Supabase Storage bucket.
"""

import logging
import mimetypes
from pathlib import PurePosixPath
from typing import Optional

from supabase import Client, create_client

from taskhub.config import Settings, get_settings
from taskhub.domain.models.base import ValidationError
from taskhub.domain.services.storage_service import StorageService


logger = logging.getLogger(__name__)


class SupabaseStorageService(StorageService):
    """Service for managing attachment storage using Supabase Storage."""

    def __init__(self, supabase_client: Client, settings: Optional[Settings] = None):
        """Initialize storage service with Supabase client."""
        self.client = supabase_client
        self.settings = settings or get_settings()
        self.bucket = self.settings.storage_bucket

    def validate_upload(self,
                        filename: str,
                        content_type: Optional[str],
                        file_size: int,
                        current_task_total: int = 0) -> None:
        """
        Validate an attachment before upload.

        Args:
            filename: Original filename
            content_type: MIME type reported by the client
            file_size: Size of the new file in bytes
            current_task_total: Bytes already attached to the task
        """
        if not filename or not filename.strip():
            raise ValidationError("Filename is required", "file_name")

        if file_size <= 0:
            raise ValidationError("File is empty", "file_size")

        extension = PurePosixPath(filename).suffix.lower()
        if extension not in self.settings.allowed_upload_extensions:
            raise ValidationError(
                f"File type not allowed: {extension or 'unknown'}", "file_type"
            )

        if file_size > self.settings.max_file_size_bytes:
            raise ValidationError(
                f"File too large (max {self.settings.max_file_size_mb}MB)", "file_size"
            )

        if current_task_total + file_size > self.settings.max_task_storage_bytes:
            raise ValidationError(
                f"Task attachments exceed {self.settings.max_task_storage_mb}MB", "file_size"
            )

        guessed_type, _ = mimetypes.guess_type(filename)
        if content_type and guessed_type and content_type != guessed_type:
            logger.warning(
                f"Content type {content_type} does not match extension of {filename}"
            )

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload a file to the attachment bucket.

        Returns:
            Path of the stored object inside the bucket
        """
        if not content_type:
            content_type, _ = mimetypes.guess_type(path)

        try:
            self.client.storage.from_(self.bucket).upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type or "application/octet-stream",
                    "upsert": "false",
                }
            )
        except Exception as e:
            logger.error(f"Failed to upload {path} to bucket {self.bucket}: {str(e)}")
            raise

        logger.info(f"Uploaded {path} ({len(content)} bytes) to bucket {self.bucket}")
        return path

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        """Get a temporary download URL for a stored object."""
        response = self.client.storage.from_(self.bucket).create_signed_url(path, expires_in)
        signed_url = response.get("signedURL") or response.get("signedUrl")
        if not signed_url:
            raise ValidationError(f"Could not create download URL for {path}")
        return signed_url

    async def delete(self, path: str) -> bool:
        """Delete a stored object."""
        self.client.storage.from_(self.bucket).remove([path])
        logger.info(f"Removed {path} from bucket {self.bucket}")
        return True


def create_storage_service(settings: Optional[Settings] = None) -> SupabaseStorageService:
    """Build a storage service with a Supabase client from settings."""
    settings = settings or get_settings()
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return SupabaseStorageService(client, settings)
