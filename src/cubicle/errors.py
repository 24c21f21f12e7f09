"""Exception hierarchy shared by the client, services and UI."""

from __future__ import annotations


class CubicleError(Exception):
    """Base exception for cubicle errors."""

    pass


class ValidationError(CubicleError):
    """Client-side validation failed. No request was sent.

    Carries one message per offending field so forms can show them inline.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        summary = "; ".join(f"{field}: {message}" for field, message in errors.items())
        super().__init__(summary or "Invalid input")

    def for_field(self, field: str) -> str | None:
        """Get the message for a single field, if any."""
        return self.errors.get(field)


class BoardLoadError(CubicleError):
    """The board could not be fetched from the server."""

    pass
