"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict

from taskhub.domain.models.base import DomainException, ValidationError


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        # Reject unknown fields
        extra="forbid",
        # JSON encoders for custom types
        json_encoders={
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        }
    )


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    id: Optional[str] = None


class CreateRequestDTO(RequestDTO):
    """Base class for creation request DTOs."""
    pass


# Common field patterns
class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TagsMixin(BaseModel):
    """Mixin for tags fields."""

    tags: List[str] = Field(default_factory=list, description="Tags")


class ErrorResponseDTO(BaseDTO):
    """Error response DTO."""

    error: str = Field(description="Error code")
    message: str = Field(description="Error message")
    field: Optional[str] = Field(default=None, description="Offending field for validation errors")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    @classmethod
    def from_exception(cls, exc: DomainException) -> "ErrorResponseDTO":
        """Build an error payload from a domain exception."""
        return cls(
            error=exc.code,
            message=exc.message,
            field=exc.field if isinstance(exc, ValidationError) else None,
        )
