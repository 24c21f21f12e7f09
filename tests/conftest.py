"""Shared fixtures: board payloads and an in-memory repository."""

from typing import Any

import pytest

from cubicle.api import ApiError
from cubicle.models import Board, BoardState, Column, Task, TaskDraft
from cubicle.services import BoardStore


def board_payload() -> dict[str, Any]:
    """GET /boards/:id payload with three columns.

    todo: t1, t2, t3 / doing: t4 / done: (empty)
    """
    return {
        "board": {
            "_id": "b1",
            "title": "Website redesign",
            "description": "Client work",
            "members": [
                {"userId": {"_id": "u1", "name": "Ada", "email": "ada@example.com"}, "role": "owner"},
                {"userId": {"_id": "u2", "name": "Linus", "email": "linus@example.com"}},
            ],
        },
        "columns": [
            # Deliberately out of order
            {"_id": "done", "title": "Done", "order": 2, "boardId": "b1"},
            {"_id": "todo", "title": "To Do", "order": 0, "boardId": "b1"},
            {"_id": "doing", "title": "In Progress", "order": 1, "boardId": "b1"},
        ],
        "tasks": [
            {"_id": "t2", "title": "Second", "columnId": "todo", "boardId": "b1", "position": 1},
            {"_id": "t1", "title": "First", "columnId": "todo", "boardId": "b1", "position": 0},
            {"_id": "t3", "title": "Third", "columnId": "todo", "boardId": "b1", "position": 2},
            {
                "_id": "t4",
                "title": "Fourth",
                "columnId": "doing",
                "boardId": "b1",
                "position": 0,
                "priority": "high",
                "subtasks": [
                    {"_id": "s1", "title": "Draft", "isCompleted": True},
                    {"_id": "s2", "title": "Review", "isCompleted": False},
                ],
            },
        ],
    }


class FakeRepository:
    """In-memory stand-in for ApiRepository.

    Keeps its own "server" copy of the board. Method names listed in
    `failing` raise ApiError instead of running.
    """

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self.server = BoardState.from_api(payload or board_payload())
        self.failing: set[str] = set()
        self.calls: list[tuple[str, tuple]] = []
        self._next_id = 100

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.failing:
            raise ApiError(f"{name} failed", status_code=500)

    def calls_to(self, name: str) -> list[tuple]:
        return [args for call, args in self.calls if call == name]

    def list_boards(self) -> list[Board]:
        self._record("list_boards")
        return [self.server.board]

    def create_board(self, title: str, description: str = "") -> Board:
        self._record("create_board", title, description)
        return Board(id="b-new", title=title, description=description)

    def delete_board(self, board_id: str) -> None:
        self._record("delete_board", board_id)

    def get_board(self, board_id: str) -> BoardState:
        self._record("get_board", board_id)
        return self.server.model_copy(deep=True)

    def create_column(self, board_id: str, title: str) -> Column:
        self._record("create_column", board_id, title)
        column = Column(id=f"c{self._next_id}", title=title, order=len(self.server.columns))
        self._next_id += 1
        self.server.add_column(column.model_copy(deep=True))
        return column

    def update_column(self, column_id: str, title: str) -> Column:
        self._record("update_column", column_id, title)
        column = self.server.get_column(column_id)
        assert column is not None
        column.title = title
        return column.model_copy(deep=True)

    def delete_column(self, column_id: str) -> None:
        self._record("delete_column", column_id)
        self.server.remove_column(column_id)

    def create_task(self, board_id: str, column_id: str, draft: TaskDraft) -> Task:
        self._record("create_task", board_id, column_id, draft)
        task = Task(id=f"t{self._next_id}", title=draft.title, column_id=column_id, board_id=board_id)
        self._next_id += 1
        self.server.insert_task(task.model_copy(deep=True))
        return task

    def update_task(self, task_id: str, draft: TaskDraft) -> Task:
        self._record("update_task", task_id, draft)
        task = self.server.tasks[task_id]
        task.title = draft.title
        task.priority = draft.priority
        task.subtasks = [s.model_copy() for s in draft.subtasks]
        return task.model_copy(deep=True)

    def delete_task(self, task_id: str) -> None:
        self._record("delete_task", task_id)
        self.server.remove_task(task_id)

    def move_task(self, task_id: str, column_id: str, position: int) -> Task:
        self._record("move_task", task_id, column_id, position)
        self.server.move_task(task_id, column_id, position)
        return self.server.tasks[task_id].model_copy(deep=True)


class Notifier:
    """Collects toasts sent by the store."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def __call__(self, message: str, severity: str = "information", **_: Any) -> None:
        self.messages.append((message, severity))

    @property
    def errors(self) -> list[str]:
        return [m for m, severity in self.messages if severity == "error"]


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def store(repo: FakeRepository, notifier: Notifier) -> BoardStore:
    """A store with the sample board loaded and the load call cleared."""
    store = BoardStore(repo, "b1", notify=notifier)
    store.load()
    repo.calls.clear()
    return store
