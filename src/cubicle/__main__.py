"""CLI entry point for cubicle."""

import argparse
from pathlib import Path

from . import __version__
from .config import Settings
from .logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cubicle",
        description="Terminal Kanban client for the Cubicle API",
    )
    parser.add_argument(
        "--board",
        dest="board_id",
        default=None,
        metavar="BOARD_ID",
        help="Open this board directly (default: pick from a list)",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Base URL of the API (default: $CUBICLE_API_URL or http://localhost:5000/api)",
    )
    parser.add_argument(
        "--login",
        metavar="EMAIL",
        default=None,
        help="Log in, store the session and exit (prompts for the password)",
    )
    parser.add_argument(
        "--logout",
        action="store_true",
        help="Forget the stored session and exit",
    )
    parser.add_argument(
        "--list-boards",
        action="store_true",
        help="Print your boards and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """CLI flags override environment settings."""
    settings_kwargs: dict = {}
    if args.board_id:
        settings_kwargs["board_id"] = args.board_id
    if args.api_url:
        settings_kwargs["api_url"] = args.api_url
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file
    return Settings(**settings_kwargs)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    settings = build_settings(args)

    setup_logging(settings.verbose, settings.log_file, settings.api_url)

    from .cli.session import run_list_boards, run_login, run_logout

    if args.logout:
        raise SystemExit(run_logout(settings))
    if args.login:
        raise SystemExit(run_login(settings, args.login))
    if args.list_boards:
        raise SystemExit(run_list_boards(settings))

    # Import here so CLI-only commands don't load Textual
    from .app import run

    run(settings)


if __name__ == "__main__":
    main()
