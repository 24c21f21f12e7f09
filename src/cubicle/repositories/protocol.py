"""Repository protocol for board storage backends."""

from typing import Protocol

from ..models import Board, BoardState, Column, Task, TaskDraft


class BoardRepositoryProtocol(Protocol):
    """Interface for board storage backends.

    The board state store only talks to this protocol, so tests can swap
    the REST backend for an in-memory one. Ids are always server-assigned.
    """

    def list_boards(self) -> list[Board]:
        """List the boards the current user is a member of."""
        ...

    def create_board(self, title: str, description: str = "") -> Board:
        """Create a board owned by the current user."""
        ...

    def delete_board(self, board_id: str) -> None:
        """Delete a board with its columns and tasks."""
        ...

    def get_board(self, board_id: str) -> BoardState:
        """Fetch a board with its columns and tasks.

        Returns:
            Fresh state with tasks grouped per column in position order.
        """
        ...

    def create_column(self, board_id: str, title: str) -> Column:
        """Create a column at the end of the board."""
        ...

    def update_column(self, column_id: str, title: str) -> Column:
        """Rename a column."""
        ...

    def delete_column(self, column_id: str) -> None:
        """Delete a column and all of its tasks."""
        ...

    def create_task(self, board_id: str, column_id: str, draft: TaskDraft) -> Task:
        """Create a task at the end of a column."""
        ...

    def update_task(self, task_id: str, draft: TaskDraft) -> Task:
        """Replace the editable fields of a task."""
        ...

    def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        ...

    def move_task(self, task_id: str, column_id: str, position: int) -> Task:
        """Move a task to a column and position.

        The server clamps position to the target column's length.
        """
        ...
