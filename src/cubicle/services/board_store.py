"""Optimistic board state store."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..api import ApiError, AuthRequiredError
from ..dnd import Droppable, DroppableKind
from ..errors import BoardLoadError, ValidationError
from ..models import TRANSIENT_PREFIX, BoardState, Column, Task, TaskDraft
from ..repositories import BoardRepositoryProtocol

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def _log_notify(message: str, severity: str = "information", **_: Any) -> None:
    """Fallback notifier when no UI is attached."""
    level = logging.ERROR if severity == "error" else logging.INFO
    logger.log(level, "notify: %s", message)


@dataclass(frozen=True)
class Move:
    """A task relocation applied locally and awaiting persistence."""

    task_id: str
    from_column_id: str
    from_index: int
    to_column_id: str
    to_index: int

    @property
    def within_column(self) -> bool:
        return self.from_column_id == self.to_column_id


class BoardStore:
    """Single owner of the client-visible board.

    All mutations go through this class. Local state changes first
    (optimistic update), then the change is sent to the server. When the
    server call fails the whole board is fetched again; if that fetch also
    fails, state falls back to the last board the server confirmed.
    """

    def __init__(
        self,
        repository: BoardRepositoryProtocol,
        board_id: str,
        notify: Callable[..., None] | None = None,
    ) -> None:
        self.repository = repository
        self.board_id = board_id
        self._notify = notify or _log_notify
        self._state: BoardState | None = None
        self._snapshot: BoardState | None = None
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    # --- State access ---

    @property
    def state(self) -> BoardState | None:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def snapshot(self) -> BoardState | None:
        """Last board state successfully loaded from the server."""
        return self._snapshot

    def view(self) -> BoardState | None:
        """Consistent copy of the current state, safe to read off-lock."""
        with self._lock:
            if self._state is None:
                return None
            return self._state.model_copy(deep=True)

    def add_listener(self, listener: Listener) -> None:
        """Register a callback run after every local change or reload."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _require_state(self) -> BoardState:
        if self._state is None:
            raise RuntimeError("Board not loaded")
        return self._state

    # --- Load ---

    def load(self) -> BoardState:
        """Fetch the board and replace all local state.

        Raises:
            BoardLoadError: The fetch failed or returned unreadable data (already notified)
            AuthRequiredError: The session is gone
        """
        try:
            state = self.repository.get_board(self.board_id)
        except AuthRequiredError:
            self._notify("Session expired. Please log in again.", severity="error")
            raise
        except ApiError as e:
            logger.error("Failed to load board %s: %s", self.board_id, e)
            self._notify("Failed to load board data", severity="error")
            raise BoardLoadError(str(e)) from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            # Malformed payload; pydantic's ValidationError is a ValueError
            logger.error("Unreadable board %s: %s", self.board_id, e)
            self._notify("Failed to load board data", severity="error")
            raise BoardLoadError(f"Unreadable board data: {e}") from e

        with self._lock:
            self._state = state
            self._snapshot = state.model_copy(deep=True)
        logger.info("Board loaded: %s (%d tasks)", self.board_id, len(state.tasks))
        self._changed()
        return state

    def reload(self) -> bool:
        """Compensating reload after a failed write.

        Returns:
            True if fresh state was fetched, False if state was reverted to
            the last confirmed snapshot instead.
        """
        try:
            self.load()
            return True
        except BoardLoadError:
            with self._lock:
                if self._snapshot is not None:
                    self._state = self._snapshot.model_copy(deep=True)
            logger.warning("Reload failed, reverted to last loaded board state")
            self._changed()
            return False

    # --- Moves ---

    def apply_move(self, task_id: str, to_column_id: str, to_index: int) -> Move | None:
        """Move a task locally, without contacting the server.

        Returns:
            The applied Move, or None when nothing changed (unknown task or
            column, task not yet saved, or same column and index).
        """
        with self._lock:
            state = self._require_state()
            source = state.column_of(task_id)
            target = state.get_column(to_column_id)
            if source is None or target is None:
                logger.debug("apply_move: unknown task or column: %s -> %s", task_id, to_column_id)
                return None
            if task_id.startswith(TRANSIENT_PREFIX):
                logger.debug("apply_move: task not saved yet: %s", task_id)
                return None

            from_index = source.task_ids.index(task_id)
            if source.id == target.id:
                clamped = max(0, min(to_index, len(source.task_ids) - 1))
                if clamped == from_index:
                    return None

            final_index = state.move_task(task_id, target.id, to_index)
            move = Move(task_id, source.id, from_index, target.id, final_index)

        logger.info(
            "Task moved: %s (%s[%d] -> %s[%d])",
            task_id,
            move.from_column_id,
            move.from_index,
            move.to_column_id,
            move.to_index,
        )
        self._changed()
        return move

    def apply_reorder(self, task_id: str, new_index: int) -> Move | None:
        """Reorder a task within its own column, locally."""
        with self._lock:
            column = self._require_state().column_of(task_id)
        if column is None:
            return None
        return self.apply_move(task_id, column.id, new_index)

    def apply_drop(self, task_id: str, target: Droppable | None) -> Move | None:
        """Translate a drop target into a local move.

        - no target, or the task itself: nothing happens
        - a column: append to the end of it
        - a task: take that task's index in its column
        """
        if target is None or target.id == task_id:
            return None

        with self._lock:
            state = self._require_state()
            if target.kind == DroppableKind.COLUMN:
                column = state.get_column(target.id)
                if column is None:
                    return None
                column_id, index = column.id, len(column.task_ids)
            else:
                column = state.column_of(target.id)
                if column is None:
                    return None
                column_id, index = column.id, column.task_ids.index(target.id)

        return self.apply_move(task_id, column_id, index)

    def persist_move(self, move: Move) -> bool:
        """Send an applied move to the server, reloading on failure."""
        try:
            self.repository.move_task(move.task_id, move.to_column_id, move.to_index)
            return True
        except AuthRequiredError:
            self._notify("Session expired. Please log in again.", severity="error")
            raise
        except ApiError as e:
            action = "reorder" if move.within_column else "move"
            logger.error("Failed to %s task %s: %s", action, move.task_id, e)
            self._notify(f"Failed to {action} task", severity="error")
            self.reload()
            return False

    def move_task(self, task_id: str, to_column_id: str, to_index: int) -> bool:
        """Move a task across columns: local update, then persistence.

        Returns:
            True if the move was applied and the server accepted it.
        """
        move = self.apply_move(task_id, to_column_id, to_index)
        if move is None:
            return False
        return self.persist_move(move)

    def reorder_within_column(self, task_id: str, new_index: int) -> bool:
        """Reorder a task inside its column: local splice, then persistence."""
        move = self.apply_reorder(task_id, new_index)
        if move is None:
            return False
        return self.persist_move(move)

    def drop(self, task_id: str, target: Droppable | None) -> bool:
        """Handle a finished drag gesture."""
        move = self.apply_drop(task_id, target)
        if move is None:
            return False
        return self.persist_move(move)

    # --- Columns ---

    def create_column(self, title: str) -> Column | None:
        """Create a column at the end of the board.

        Raises:
            ValidationError: Blank title (nothing is sent)
        """
        title = validate_title(title)
        try:
            column = self.repository.create_column(self.board_id, title)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to add column: %s", e)
            self._notify("Failed to add column", severity="error")
            return None

        with self._lock:
            self._require_state().add_column(column)
        self._changed()
        self._notify("Column added successfully")
        return column

    def rename_column(self, column_id: str, title: str) -> bool:
        """Rename a column.

        Raises:
            ValidationError: Blank title (nothing is sent)
        """
        title = validate_title(title)
        with self._lock:
            column = self._require_state().get_column(column_id)
            if column is None:
                return False
            column.title = title
        self._changed()

        try:
            self.repository.update_column(column_id, title)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to update column %s: %s", column_id, e)
            self._notify("Failed to update column", severity="error")
            self.reload()
            return False
        self._notify("Column updated successfully")
        return True

    def delete_column(self, column_id: str) -> bool:
        """Delete a column and its tasks once the server confirms."""
        try:
            self.repository.delete_column(column_id)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to delete column %s: %s", column_id, e)
            self._notify("Failed to delete column", severity="error")
            return False

        with self._lock:
            self._require_state().remove_column(column_id)
        self._changed()
        self._notify("Column deleted successfully")
        return True

    # --- Tasks ---

    def create_task(self, column_id: str, draft: TaskDraft) -> Task | None:
        """Create a task at the end of a column.

        A placeholder with a transient id is shown right away; the board is
        reloaded afterwards so the server-assigned id replaces it.
        """
        placeholder = Task(
            id=f"{TRANSIENT_PREFIX}{uuid.uuid4().hex}",
            title=draft.title,
            column_id=column_id,
            board_id=self.board_id,
            description=draft.description,
            due_date=draft.due_date,
            priority=draft.priority,
            labels=draft.labels,
            subtasks=draft.subtasks,
        )
        with self._lock:
            state = self._require_state()
            if state.get_column(column_id) is None:
                return None
            state.insert_task(placeholder)
        self._changed()

        try:
            created = self.repository.create_task(self.board_id, column_id, draft)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to create task: %s", e)
            self._notify(f"Failed to create task: {e.message}", severity="error")
            self.reload()
            return None

        logger.info("Task created: %s in %s", created.id, column_id)
        self.reload()
        self._notify("Task created successfully")
        return created

    def update_task(self, task_id: str, draft: TaskDraft) -> Task | None:
        """Save edited task fields, then refetch the board."""
        try:
            updated = self.repository.update_task(task_id, draft)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to update task %s: %s", task_id, e)
            self._notify(f"Failed to update task: {e.message}", severity="error")
            return None

        self.reload()
        self._notify("Task updated successfully")
        return updated

    def delete_task(self, task_id: str) -> bool:
        """Remove a task locally, then on the server."""
        with self._lock:
            removed = self._require_state().remove_task(task_id)
        if removed is None:
            return False
        self._changed()

        try:
            self.repository.delete_task(task_id)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to delete task %s: %s", task_id, e)
            self._notify("Failed to delete task", severity="error")
            self.reload()
            return False
        self._notify("Task deleted successfully")
        return True

    def toggle_subtask(self, task_id: str, index: int) -> bool:
        """Flip a checklist item locally and save the whole checklist."""
        with self._lock:
            task = self._require_state().get_task(task_id)
            if task is None or not 0 <= index < len(task.subtasks):
                return False
            subtask = task.subtasks[index]
            subtask.completed = not subtask.completed
            draft = TaskDraft.from_task(task)
        self._changed()

        try:
            self.repository.update_task(task_id, draft)
        except AuthRequiredError:
            raise
        except ApiError as e:
            logger.error("Failed to update checklist of %s: %s", task_id, e)
            self._notify("Failed to update checklist", severity="error")
            self.reload()
            return False
        return True


def validate_title(title: str, subject: str = "Column") -> str:
    """Strip a column or board title; blank titles raise ValidationError."""
    title = title.strip()
    if not title:
        raise ValidationError({"title": f"{subject} title cannot be empty"})
    return title
