"""Colorful CLI output helpers."""

from rich.console import Console
from rich.table import Table

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def success(message: str) -> None:
    """Print success message with green checkmark."""
    console.print(f"[green]✓[/] {message}")


def info(message: str) -> None:
    """Print info message with yellow bullet."""
    console.print(f"[yellow]•[/] {message}")


def error(message: str) -> None:
    """Print error message with red cross to stderr."""
    error_console.print(f"[red]✗[/] {message}")


def table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    """Print rows as a simple table."""
    result = Table(title=title, title_justify="left", show_edge=False)
    for column in columns:
        result.add_column(column)
    for row in rows:
        result.add_row(*row)
    console.print(result)
