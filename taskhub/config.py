"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, validator
from pathlib import Path

# Get the base directory
BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_UPLOAD_EXTENSIONS = [
    ".pdf", ".png", ".jpg", ".jpeg", ".doc", ".docx", ".xls", ".xlsx", ".txt", ".zip"
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # Database
    database_url: str = Field(
        default=f"sqlite:///{BASE_DIR / 'taskhub.db'}",
        description="SQLAlchemy database URL"
    )

    # Supabase Storage
    supabase_url: str = Field(default="https://example.supabase.co", description="Supabase project URL")
    supabase_service_key: str = Field(default="temp-key", description="Supabase service role key")
    storage_bucket: str = Field(default="task-attachments")
    signed_url_expires_in: int = Field(default=3600)  # seconds

    # Attachments
    max_file_size_mb: int = Field(default=10)
    max_task_storage_mb: int = Field(default=50)
    allowed_upload_extensions: str | List[str] = Field(
        default_factory=lambda: list(DEFAULT_UPLOAD_EXTENSIONS)
    )

    @validator("allowed_upload_extensions", pre=True)
    def parse_upload_extensions(cls, v):
        """Parse upload extensions from comma-separated string or list."""
        if isinstance(v, str):
            if not v or v.strip() == "":
                return list(DEFAULT_UPLOAD_EXTENSIONS)
            return [ext.strip().lower() for ext in v.split(",")]
        elif v is None:
            return list(DEFAULT_UPLOAD_EXTENSIONS)
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def max_file_size_bytes(self) -> int:
        """Get max single upload size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def max_task_storage_bytes(self) -> int:
        """Get max total attachment size per task in bytes."""
        return self.max_task_storage_mb * 1024 * 1024

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        required_vars = [
            "database_url",
            "supabase_url",
            "supabase_service_key",
        ]

        missing_vars = []
        for var in required_vars:
            if not getattr(self, var, None):
                missing_vars.append(var.upper())

        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings
