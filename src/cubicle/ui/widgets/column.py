"""Kanban column widget."""

import re

from rich.markup import escape
from textual.actions import SkipAction
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import Static

from ...models import Task
from .task_card import TaskCard


def css_id(prefix: str, identifier: str) -> str:
    """CSS-safe widget id from a server id, e.g. ("task", "65f0...") -> "task-65f0..."."""
    safe_id = re.sub(r"[^a-zA-Z0-9\-]", "-", identifier).strip("-").lower()
    return f"{prefix}-{safe_id or 'x'}"


class CardList(VerticalScroll):
    """Scrollable stack of cards. j/k and arrows belong to the board, not the scrollbar."""

    def _defer_to_board(self) -> None:
        raise SkipAction()

    action_scroll_up = _defer_to_board
    action_scroll_down = _defer_to_board
    action_scroll_home = _defer_to_board
    action_scroll_end = _defer_to_board


class EmptyColumnMessage(Static):
    """Displayed when a column has no tasks."""


class KanbanColumn(Widget):
    """A single column in the kanban board."""

    def __init__(self, column_id: str, title: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.column_id = column_id
        self.title = title
        self._tasks: list[Task] = []

    def compose(self) -> ComposeResult:
        yield Static(self._header_text, classes="column-header")
        yield CardList(classes="column-content")

    @property
    def _header_text(self) -> str:
        return f"{escape(self.title)} [dim]({len(self._tasks)})[/]"

    def set_title(self, title: str) -> None:
        self.title = title
        self._update_header()

    async def set_tasks(self, tasks: list[Task]) -> None:
        """Replace the cards shown in this column."""
        self._tasks = list(tasks)
        try:
            content = self.query_one(CardList)
        except NoMatches:
            return

        await content.remove_children()
        if not self._tasks:
            await content.mount(EmptyColumnMessage("No tasks"))
        else:
            await content.mount_all(TaskCard(task, id=css_id("task", task.id)) for task in self._tasks)
        self._update_header()

    def _update_header(self) -> None:
        try:
            self.query_one(".column-header", Static).update(self._header_text)
        except NoMatches:
            pass

    @property
    def tasks(self) -> list[Task]:
        return self._tasks

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    @property
    def cards(self) -> list[TaskCard]:
        """Mounted task cards, in display order."""
        return list(self.query(TaskCard))

    def focus_task(self, index: int) -> bool:
        """Focus the task at the given index.

        Returns:
            True if a task was focused, False otherwise
        """
        if not 0 <= index < len(self._tasks):
            return False
        try:
            card = self.query_one(f"#{css_id('task', self._tasks[index].id)}", TaskCard)
        except NoMatches:
            return False
        card.focus()
        card.scroll_visible()
        return True

    def get_task(self, index: int) -> Task | None:
        if 0 <= index < len(self._tasks):
            return self._tasks[index]
        return None

    def index_of(self, task_id: str) -> int:
        """Index of a task in this column, or -1."""
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        return -1
