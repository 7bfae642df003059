"""
Priority value object.
Tasks carry an integer priority from 1 (lowest) to 10 (highest).
"""

from dataclasses import dataclass
from enum import Enum

from taskhub.domain.models.base import ValueObject, ValidationError


MIN_PRIORITY = 1
MAX_PRIORITY = 10


class PriorityLabel(str, Enum):
    """Display buckets for the numeric priority."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Priority(ValueObject):
    """Task priority between 1 and 10 inclusive."""

    value: int

    def validate(self) -> None:
        # bool is an int subclass
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError("Priority must be an integer", "priority")
        if not MIN_PRIORITY <= self.value <= MAX_PRIORITY:
            raise ValidationError(
                f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}", "priority"
            )

    @property
    def label(self) -> PriorityLabel:
        if self.value <= 3:
            return PriorityLabel.LOW
        if self.value <= 6:
            return PriorityLabel.MEDIUM
        if self.value <= 8:
            return PriorityLabel.HIGH
        return PriorityLabel.CRITICAL

    @property
    def is_high(self) -> bool:
        return self.value >= 8

    @property
    def is_medium(self) -> bool:
        return 4 <= self.value <= 7

    @property
    def is_low(self) -> bool:
        return self.value <= 3

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} ({self.label.value})"
