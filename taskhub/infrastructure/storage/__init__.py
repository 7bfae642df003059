"""
Attachment storage adapters.
"""

from .storage_service import SupabaseStorageService, create_storage_service

__all__ = [
    "SupabaseStorageService",
    "create_storage_service",
]
