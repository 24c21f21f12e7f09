"""Utilities for datetime handling."""

from datetime import UTC, date, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def from_iso(value: str) -> datetime:
    """Parse ISO format string to datetime.

    Accepts a bare date ("2026-03-01") as midnight of that day.
    """
    value = value.strip()
    if len(value) == 10:
        d = date.fromisoformat(value)
        return datetime(d.year, d.month, d.day)
    # Handle both 'Z' suffix and explicit timezone
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_due(dt: datetime) -> str:
    """Short due date for cards, e.g. 'Mar 1'."""
    return f"{dt:%b} {dt.day}"
