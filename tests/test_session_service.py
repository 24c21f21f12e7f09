"""Tests for SessionService."""

from pathlib import Path

import pytest
import yaml

from cubicle.api import AuthRequiredError
from cubicle.services import SessionService


@pytest.fixture
def session_file(tmp_path: Path) -> Path:
    return tmp_path / "config" / "cubicle" / "session.yml"


class TestSessionLoad:
    """Tests for reading the session file."""

    def test_missing_file_is_no_session(self, session_file: Path):
        session = SessionService(session_file)
        assert session.token is None
        assert session.user == {}

    def test_reads_token_and_user(self, session_file: Path):
        session_file.parent.mkdir(parents=True)
        session_file.write_text("access_token: abc\nuser:\n  name: Ada\n  email: ada@example.com\n")

        session = SessionService(session_file)

        assert session.token == "abc"
        assert session.user_display_name == "Ada"

    def test_display_name_falls_back_to_email(self, session_file: Path):
        session_file.parent.mkdir(parents=True)
        session_file.write_text("access_token: abc\nuser:\n  email: ada@example.com\n")
        assert SessionService(session_file).user_display_name == "ada@example.com"

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n", "access_token: [unclosed\n"])
    def test_malformed_file_is_no_session(self, session_file: Path, content: str):
        """Empty, non-mapping or invalid YAML is treated as logged out."""
        session_file.parent.mkdir(parents=True)
        session_file.write_text(content)
        assert SessionService(session_file).token is None


class TestSessionSave:
    """Tests for writing the session file."""

    def test_save_creates_directories(self, session_file: Path):
        SessionService(session_file).save("abc", {"name": "Ada"})

        data = yaml.safe_load(session_file.read_text())
        assert data == {"access_token": "abc", "user": {"name": "Ada"}}

    def test_save_is_private(self, session_file: Path):
        SessionService(session_file).save("abc")
        assert session_file.stat().st_mode & 0o777 == 0o600

    def test_save_keeps_existing_user(self, session_file: Path):
        session = SessionService(session_file)
        session.save("abc", {"name": "Ada"})
        session.save("def")

        reloaded = SessionService(session_file)
        assert reloaded.token == "def"
        assert reloaded.user == {"name": "Ada"}

    def test_clear(self, session_file: Path):
        session = SessionService(session_file)
        session.save("abc")
        session.clear()

        assert not session_file.exists()
        assert session.token is None

    def test_clear_without_file(self, session_file: Path):
        SessionService(session_file).clear()


class TestUpdateToken:
    """Tests for the ApiClient token hook."""

    def test_new_token_is_saved(self, session_file: Path):
        session = SessionService(session_file)
        session.update_token("refreshed")
        assert SessionService(session_file).token == "refreshed"

    def test_none_clears(self, session_file: Path):
        session = SessionService(session_file)
        session.save("abc")
        session.update_token(None)
        assert not session_file.exists()

    def test_require_token(self, session_file: Path):
        session = SessionService(session_file)
        with pytest.raises(AuthRequiredError):
            session.require_token()
        session.save("abc")
        assert session.require_token() == "abc"
