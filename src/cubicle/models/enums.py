"""Enums for task priority."""

from enum import Enum


class Priority(str, Enum):
    """Priority levels for tasks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def values(cls) -> list[str]:
        """All priority values, lowest first."""
        return [p.value for p in cls]
