"""Utility functions."""

from .datetime import format_due, from_iso, now_utc

__all__ = [
    "format_due",
    "from_iso",
    "now_utc",
]
