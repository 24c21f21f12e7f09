"""REST API repository implementation."""

from __future__ import annotations

import logging

from ..api import ApiClient
from ..models import Board, BoardState, Column, Task, TaskDraft

logger = logging.getLogger(__name__)


class ApiRepository:
    """Repository backed by the Cubicle REST API."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def list_boards(self) -> list[Board]:
        data = self.client.get("/boards") or []
        return [Board.from_api(b) for b in data]

    def create_board(self, title: str, description: str = "") -> Board:
        data = self.client.post("/boards", {"title": title, "description": description})
        logger.info("Board created: %s", data.get("_id"))
        return Board.from_api(data)

    def delete_board(self, board_id: str) -> None:
        self.client.delete(f"/boards/{board_id}")
        logger.info("Board deleted: %s", board_id)

    def get_board(self, board_id: str) -> BoardState:
        data = self.client.get(f"/boards/{board_id}")
        state = BoardState.from_api(data)
        logger.debug(
            "Fetched board %s: %d columns, %d tasks",
            board_id,
            len(state.columns),
            len(state.tasks),
        )
        return state

    def create_column(self, board_id: str, title: str) -> Column:
        data = self.client.post("/columns", {"title": title, "boardId": board_id})
        return Column.from_api(data)

    def update_column(self, column_id: str, title: str) -> Column:
        data = self.client.put(f"/columns/{column_id}", {"title": title})
        return Column.from_api(data)

    def delete_column(self, column_id: str) -> None:
        self.client.delete(f"/columns/{column_id}")

    def create_task(self, board_id: str, column_id: str, draft: TaskDraft) -> Task:
        payload = draft.to_api()
        payload["boardId"] = board_id
        payload["columnId"] = column_id
        data = self.client.post("/tasks", payload)
        return Task.from_api(data)

    def update_task(self, task_id: str, draft: TaskDraft) -> Task:
        data = self.client.put(f"/tasks/{task_id}", draft.to_api())
        return Task.from_api(data)

    def delete_task(self, task_id: str) -> None:
        self.client.delete(f"/tasks/{task_id}")

    def move_task(self, task_id: str, column_id: str, position: int) -> Task:
        data = self.client.put(
            f"/tasks/{task_id}/move", {"columnId": column_id, "position": position}
        )
        return Task.from_api(data)
