"""Application settings."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def _default_session_file() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(config_home) / "cubicle" / "session.yml"


class Settings(BaseSettings):
    """Application settings."""

    api_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL of the Cubicle REST API",
    )

    board_id: str | None = Field(
        default=None,
        description="Board to open on start (default: choose from a list)",
    )

    session_file: Path = Field(
        default_factory=_default_session_file,
        description="Where the access token is stored between runs",
    )

    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    editor: str | None = Field(
        default=None,
        description="Editor for task editing (default: $EDITOR, $VISUAL, then nvim, vim, vi or nano)",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "CUBICLE_",
    }
