"""Session storage for the API access token."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..api import AuthRequiredError

logger = logging.getLogger(__name__)


class SessionService:
    """Persists the access token and user between runs.

    The session file is plain YAML:

        access_token: eyJ...
        user:
          id: 64f...
          name: Jane
          email: jane@example.com
    """

    def __init__(self, session_file: Path) -> None:
        self.session_file = session_file
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        """Load the session file, treating unreadable files as no session."""
        if self._data is not None:
            return self._data

        self._data = {}
        if not self.session_file.exists():
            logger.debug("No session file at %s", self.session_file)
            return self._data

        try:
            with self.session_file.open() as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.session_file, e)
            return self._data

        if isinstance(data, dict):
            self._data = data
        else:
            logger.warning("Ignoring malformed session file %s", self.session_file)
        return self._data

    @property
    def token(self) -> str | None:
        token = self._load().get("access_token")
        return str(token) if token else None

    @property
    def user(self) -> dict[str, Any]:
        return self._load().get("user") or {}

    @property
    def user_display_name(self) -> str:
        user = self.user
        return user.get("name") or user.get("email") or ""

    def save(self, token: str, user: dict[str, Any] | None = None) -> None:
        """Write a new session, keeping the stored user when none is given."""
        data = dict(self._load())
        data["access_token"] = token
        if user is not None:
            data["user"] = user
        self.session_file.parent.mkdir(parents=True, exist_ok=True)
        with self.session_file.open("w") as f:
            yaml.safe_dump(data, f, sort_keys=False)
        self.session_file.chmod(0o600)
        self._data = data
        logger.debug("Session saved to %s", self.session_file)

    def clear(self) -> None:
        """Forget the session (logout)."""
        self.session_file.unlink(missing_ok=True)
        self._data = {}
        logger.info("Session cleared")

    def update_token(self, token: str | None) -> None:
        """Token change hook for ApiClient: refreshed token or logout."""
        if token:
            self.save(token)
        else:
            self.clear()

    def require_token(self) -> str:
        """Get the token, or fail so the caller can route to login.

        Raises:
            AuthRequiredError: No stored session
        """
        token = self.token
        if not token:
            raise AuthRequiredError("Not logged in", status_code=401, code="NO_TOKEN")
        return token
