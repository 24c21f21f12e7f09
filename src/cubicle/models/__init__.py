"""Data models."""

from .board import Board, BoardState, Column
from .enums import Priority
from .task import (
    TRANSIENT_PREFIX,
    Label,
    Member,
    Subtask,
    Task,
    TaskDraft,
    validate_task_fields,
)

__all__ = [
    "TRANSIENT_PREFIX",
    "Board",
    "BoardState",
    "Column",
    "Label",
    "Member",
    "Priority",
    "Subtask",
    "Task",
    "TaskDraft",
    "validate_task_fields",
]
