"""Board state models."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from .task import Member, Task

logger = logging.getLogger(__name__)


class Column(BaseModel):
    """An ordered bucket of tasks. Order of task_ids is display order."""

    id: str
    title: str
    order: int = 0
    task_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Column:
        return cls(
            id=str(data.get("_id") or data["id"]),
            title=data.get("title", ""),
            order=int(data.get("order") or 0),
        )


class Board(BaseModel):
    """Top-level Kanban container."""

    id: str
    title: str
    description: str = ""
    members: list[Member] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Board:
        members = []
        for entry in data.get("members") or []:
            user = entry.get("userId") if isinstance(entry, dict) else entry
            if user:
                members.append(Member.from_api(user))
        return cls(
            id=str(data.get("_id") or data["id"]),
            title=data.get("title", ""),
            description=data.get("description") or "",
            members=members,
        )


class BoardState(BaseModel):
    """Client-side board: columns in order, each holding an ordered task sequence.

    Every task id appears in exactly one column's task_ids, and each
    task's position equals its index in that list.
    """

    board: Board
    columns: list[Column] = Field(default_factory=list)
    tasks: dict[str, Task] = Field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BoardState:
        """Build state from a GET /boards/:id payload.

        Tasks are grouped by column and sorted by position. Tasks that
        reference an unknown column are left out.
        """
        board = Board.from_api(data["board"])
        columns = sorted(
            (Column.from_api(c) for c in data.get("columns") or []),
            key=lambda c: c.order,
        )
        state = cls(board=board, columns=columns)
        by_column = {c.id: c for c in columns}

        tasks = [Task.from_api(t) for t in data.get("tasks") or []]
        # sorted() is stable so ties keep server order
        for task in sorted(tasks, key=lambda t: t.position):
            column = by_column.get(task.column_id)
            if column is None:
                logger.debug("Skipping task %s in unknown column %s", task.id, task.column_id)
                continue
            column.task_ids.append(task.id)
            state.tasks[task.id] = task

        for column in columns:
            state.renumber(column.id)
        return state

    @property
    def column_ids(self) -> list[str]:
        return [c.id for c in self.columns]

    def get_column(self, column_id: str) -> Column | None:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def get_task(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def column_of(self, task_id: str) -> Column | None:
        """Get the column currently holding a task."""
        for column in self.columns:
            if task_id in column.task_ids:
                return column
        return None

    def index_of(self, task_id: str) -> int:
        """Get position of task in its column, or -1 if not found."""
        column = self.column_of(task_id)
        if column is None:
            return -1
        return column.task_ids.index(task_id)

    def tasks_in(self, column_id: str) -> list[Task]:
        """Tasks of a column in display order."""
        column = self.get_column(column_id)
        if column is None:
            return []
        return [self.tasks[tid] for tid in column.task_ids]

    def layout(self) -> dict[str, list[str]]:
        """Column id -> ordered task ids."""
        return {c.id: list(c.task_ids) for c in self.columns}

    def move_task(self, task_id: str, to_column_id: str, index: int) -> int:
        """Splice a task out of its column and into another at index.

        The index is clamped to [0, len(target)] after removal, so an
        out-of-range index appends or prepends instead of failing.

        Returns:
            The index the task ended up at.

        Raises:
            KeyError: If the task or target column does not exist.
        """
        source = self.column_of(task_id)
        target = self.get_column(to_column_id)
        if source is None or task_id not in self.tasks:
            raise KeyError(f"Unknown task: {task_id}")
        if target is None:
            raise KeyError(f"Unknown column: {to_column_id}")

        source.task_ids.remove(task_id)
        index = max(0, min(index, len(target.task_ids)))
        target.task_ids.insert(index, task_id)
        self.tasks[task_id].column_id = target.id

        self.renumber(source.id)
        if target.id != source.id:
            self.renumber(target.id)
        return index

    def insert_task(self, task: Task, index: int = -1) -> None:
        """Add a task to its column (-1 = end)."""
        column = self.get_column(task.column_id)
        if column is None:
            raise KeyError(f"Unknown column: {task.column_id}")
        self.remove_task(task.id)
        if index < 0 or index > len(column.task_ids):
            column.task_ids.append(task.id)
        else:
            column.task_ids.insert(index, task.id)
        self.tasks[task.id] = task
        self.renumber(column.id)

    def remove_task(self, task_id: str) -> Task | None:
        """Remove a task from the board, returning it if it was present."""
        column = self.column_of(task_id)
        if column is not None:
            column.task_ids.remove(task_id)
            self.renumber(column.id)
        return self.tasks.pop(task_id, None)

    def add_column(self, column: Column) -> None:
        """Append a column after the existing ones."""
        if self.get_column(column.id) is None:
            self.columns.append(column)

    def remove_column(self, column_id: str) -> Column | None:
        """Remove a column together with its tasks."""
        column = self.get_column(column_id)
        if column is None:
            return None
        for task_id in column.task_ids:
            self.tasks.pop(task_id, None)
        self.columns.remove(column)
        return column

    def renumber(self, column_id: str) -> None:
        """Make task positions in a column contiguous from 0."""
        column = self.get_column(column_id)
        if column is None:
            return
        for position, task_id in enumerate(column.task_ids):
            self.tasks[task_id].position = position
