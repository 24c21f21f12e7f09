"""Cubicle REST API client."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from ..errors import CubicleError

logger = logging.getLogger(__name__)

# 401 codes that mean "access token is stale, try the refresh cookie"
REFRESHABLE_CODES = frozenset({"TOKEN_EXPIRED", "AUTH_FAILED", "INVALID_TOKEN"})

# 401 codes that end the session outright
LOGOUT_CODES = frozenset(
    {"NO_TOKEN", "USER_NOT_FOUND", "EMAIL_NOT_VERIFIED", "ACCOUNT_DEACTIVATED"}
)


class ApiError(CubicleError):
    """Base exception for API and network failures."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class AuthRequiredError(ApiError):
    """No valid session. The user has to log in again."""

    pass


class ForbiddenError(ApiError):
    """Permission denied."""

    pass


class NotFoundError(ApiError):
    """Resource not found."""

    pass


class ServerValidationError(ApiError):
    """The server rejected the request body."""

    pass


class ApiClient:
    """Thin wrapper around the Cubicle REST API.

    Provides:
    - Bearer token authentication
    - Unwrapping of the {"success", "data", "message"} envelope
    - One refresh-and-retry on expired access tokens
    - Error mapping to the ApiError hierarchy
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        on_token_change: Callable[[str | None], None] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            base_url: API root, e.g. http://localhost:5000/api
            token: Access token from a previous login
            timeout: Request timeout in seconds
            on_token_change: Called with the new token after a refresh, or
                None when the session ends
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._on_token_change = on_token_change
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str | None) -> None:
        """Replace the access token and tell the session owner."""
        self.token = token
        if self._on_token_change is not None:
            self._on_token_change(token)

    # --- Auth ---

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and store the returned access token.

        Returns:
            The user object from the login response.

        Raises:
            AuthRequiredError: Bad credentials
            ApiError: MFA challenge or other failures
        """
        data = self.request(
            "POST", "/auth/login", json={"email": email, "password": password}, auth=False
        )
        if data.get("requiresMFA"):
            raise ApiError("Two-factor login is not supported by this client")
        token = data.get("accessToken")
        if not token:
            raise ApiError("Login response did not include an access token")
        self.set_token(token)
        logger.info("Logged in as %s", email)
        return data.get("user") or {}

    def refresh(self) -> str:
        """Exchange the refresh cookie for a new access token."""
        data = self.request("POST", "/auth/refresh", json={}, auth=False)
        token = data.get("accessToken")
        if not token:
            raise AuthRequiredError("Session refresh failed", status_code=401)
        self.set_token(token)
        logger.info("Access token refreshed")
        return token

    # --- Requests ---

    def request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        auth: bool = True,
        _retry: bool = True,
    ) -> Any:
        """Send a request and return the unwrapped 'data' field.

        Raises:
            AuthRequiredError: Missing or expired session
            ForbiddenError: Permission denied
            NotFoundError: Resource not found
            ServerValidationError: Request body rejected
            ApiError: Network errors and other failures
        """
        headers = {}
        if auth:
            if not self.token:
                raise AuthRequiredError("Not logged in", status_code=401, code="NO_TOKEN")
            headers["Authorization"] = f"Bearer {self.token}"

        # Request bodies only at DEBUG to keep credentials out of INFO logs
        logger.debug("%s %s: body=%s", method, path, None if path.startswith("/auth") else json)

        start_time = time.monotonic()
        try:
            response = self._client.request(method, path, json=json, headers=headers)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("%s %s failed after %.0fms: %s", method, path, elapsed_ms, e)
            raise ApiError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        body = self._parse_body(response)
        message = body.get("message") if isinstance(body, dict) else None
        code = body.get("code") if isinstance(body, dict) else None

        if response.status_code == 401:
            logger.error("%s %s: 401 Unauthorized code=%s (%.0fms)", method, path, code, elapsed_ms)
            if auth and _retry and code in REFRESHABLE_CODES:
                try:
                    self.refresh()
                except ApiError as e:
                    logger.warning("Token refresh failed: %s", e)
                    self.set_token(None)
                    raise AuthRequiredError(
                        "Session expired. Please log in again.", status_code=401, code=code
                    ) from e
                return self.request(method, path, json=json, auth=auth, _retry=False)
            if auth and (code in LOGOUT_CODES or code in REFRESHABLE_CODES):
                self.set_token(None)
            raise AuthRequiredError(
                message or "Authentication required", status_code=401, code=code
            )
        if response.status_code == 403:
            logger.error("%s %s: 403 Forbidden (%.0fms)", method, path, elapsed_ms)
            raise ForbiddenError(message or "Permission denied", status_code=403, code=code)
        if response.status_code == 404:
            logger.error("%s %s: 404 Not Found (%.0fms)", method, path, elapsed_ms)
            raise NotFoundError(message or "Resource not found", status_code=404, code=code)
        if response.status_code in (400, 422):
            logger.error("%s %s: %d Rejected (%.0fms)", method, path, response.status_code, elapsed_ms)
            raise ServerValidationError(
                self._validation_message(body) or "Invalid request",
                status_code=response.status_code,
                code=code,
            )
        if response.status_code >= 400:
            logger.error("%s %s: HTTP %d (%.0fms)", method, path, response.status_code, elapsed_ms)
            raise ApiError(
                message or f"HTTP {response.status_code}",
                status_code=response.status_code,
                code=code,
            )

        if isinstance(body, dict) and body.get("success") is False:
            logger.error("%s %s: unsuccessful response (%.0fms)", method, path, elapsed_ms)
            raise ApiError(message or "Request failed", status_code=response.status_code)

        logger.info("%s %s: %d (%.0fms)", method, path, response.status_code, elapsed_ms)
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def get(self, path: str) -> Any:
        return self.request("GET", path)

    def post(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, json=json or {})

    def put(self, path: str, json: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, json=json or {})

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """Parse a JSON body, tolerating empty or non-JSON responses."""
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"message": response.text}

    @staticmethod
    def _validation_message(body: Any) -> str | None:
        """Flatten express-validator style error lists."""
        if not isinstance(body, dict):
            return None
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e.get("msg", e)) if isinstance(e, dict) else str(e) for e in errors)
        return body.get("message")
