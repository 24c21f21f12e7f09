"""Service layer for business logic."""

from .board_store import BoardStore, Move, validate_title
from .session_service import SessionService
from .task_service import TaskService, format_task_document, parse_task_document

__all__ = [
    "BoardStore",
    "Move",
    "SessionService",
    "TaskService",
    "format_task_document",
    "parse_task_document",
    "validate_title",
]
