"""Login, logout and board listing commands."""

from __future__ import annotations

import getpass
import logging

from ..api import ApiClient, ApiError, AuthRequiredError
from ..config import Settings
from ..repositories import ApiRepository
from ..services import SessionService
from .output import error, info, success, table

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_AUTH = 2


def build_client(settings: Settings, session: SessionService) -> ApiClient:
    """Create an API client wired to the stored session."""
    return ApiClient(
        settings.api_url,
        token=session.token,
        timeout=settings.timeout,
        on_token_change=session.update_token,
    )


def run_login(settings: Settings, email: str, password: str | None = None) -> int:
    """Log in and store the session. Prompts for the password if needed."""
    session = SessionService(settings.session_file)
    if password is None:
        password = getpass.getpass(f"Password for {email}: ")
    if not email.strip() or not password:
        error("Email and password are required")
        return EXIT_ERROR

    with build_client(settings, session) as client:
        try:
            user = client.login(email.strip(), password)
        except AuthRequiredError as e:
            error(f"Login failed: {e.message}")
            return EXIT_AUTH
        except ApiError as e:
            error(f"Login failed: {e.message}")
            return EXIT_ERROR

    # login() already stored the token through on_token_change
    session.save(client.token or "", user)
    success(f"Logged in as {user.get('name') or email}")
    return EXIT_OK


def run_logout(settings: Settings) -> int:
    """Forget the stored session."""
    SessionService(settings.session_file).clear()
    success("Logged out")
    return EXIT_OK


def run_list_boards(settings: Settings) -> int:
    """Print the boards of the logged-in user."""
    session = SessionService(settings.session_file)
    try:
        session.require_token()
    except AuthRequiredError:
        error("Not logged in. Run: cubicle --login EMAIL")
        return EXIT_AUTH

    with build_client(settings, session) as client:
        try:
            boards = ApiRepository(client).list_boards()
        except AuthRequiredError:
            error("Session expired. Run: cubicle --login EMAIL")
            return EXIT_AUTH
        except ApiError as e:
            error(f"Failed to fetch boards: {e.message}")
            return EXIT_ERROR

    if not boards:
        info("No boards yet")
        return EXIT_OK

    table("Boards", ["ID", "Title", "Description"], [[b.id, b.title, b.description] for b in boards])
    return EXIT_OK
