"""Main kanban board screen."""

from __future__ import annotations

import logging

from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.errors import NoWidget
from textual.geometry import Region
from textual.screen import Screen
from textual.widget import Widget
from textual.widgets import Footer, Header, Static

from ...dnd import DragController, DragPhase, Droppable, DroppableKind, Rect
from ...models import Column, Task
from ...services import BoardStore
from ..widgets import GhostCard, KanbanColumn, TaskCard
from ..widgets.column import CardList, css_id

logger = logging.getLogger(__name__)


def region_rect(region: Region) -> Rect:
    """Screen region as a collision rectangle."""
    return Rect(region.x, region.y, region.width, region.height)


class BoardScreen(Screen):
    """Kanban board with keyboard navigation and mouse drag and drop."""

    DEFAULT_CSS = """
    BoardScreen {
        layers: base overlay;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel_drag", "Cancel drag", show=False),
    ]

    def __init__(self, store: BoardStore, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.store = store
        self._current_column = 0
        self._current_task = 0
        self._follow_task_id: str | None = None
        self._drag = DragController()
        self._pressed_card: TaskCard | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="board-container"):
            yield Horizontal(id="columns")
        yield Static("", id="board-message")
        yield GhostCard(id="ghost")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = "Loading…"
        if self.store.is_loaded:
            self.render_board()

    # --- Rendering ---

    def render_board(self, follow_task_id: str | None = None) -> None:
        """Rebuild columns from the store. Focus follows follow_task_id if given."""
        if follow_task_id is not None:
            self._follow_task_id = follow_task_id
        self.run_worker(self._rebuild(), group="render", exclusive=True)

    async def _rebuild(self) -> None:
        state = self.store.view()
        if state is None:
            return

        container = self.query_one("#columns", Horizontal)
        mounted = list(container.query(KanbanColumn))
        if [c.column_id for c in mounted] != state.column_ids:
            await container.remove_children()
            await container.mount_all(self._build_column(column) for column in state.columns)
            mounted = list(container.query(KanbanColumn))

        for widget, column in zip(mounted, state.columns, strict=True):
            widget.set_title(column.title)
            await widget.set_tasks(state.tasks_in(column.id))

        self.sub_title = state.board.title
        if state.columns:
            self.set_message("")
        else:
            self.set_message("No columns yet. Press [b]c[/] to add one.")
        self._apply_focus()

    def _build_column(self, column: Column) -> KanbanColumn:
        return KanbanColumn(column.id, column.title, id=css_id("column", column.id))

    def set_message(self, message: str) -> None:
        panel = self.query_one("#board-message", Static)
        panel.update(message)
        panel.display = bool(message)

    def show_load_error(self) -> None:
        """Error panel shown when the board could not be fetched."""
        self.sub_title = "Error"
        self.set_message("[red]Failed to load board data.[/] Press [b]r[/] to retry.")

    def _apply_focus(self) -> None:
        if self._follow_task_id is not None:
            position = self._find_task_position(self._follow_task_id)
            self._follow_task_id = None
            if position is not None:
                self._current_column, self._current_task = position
                self._update_focus()
                return

        self._current_column = max(0, min(self._current_column, self.column_count - 1))
        column = self._get_column(self._current_column)
        if column and column.task_count > 0:
            self._current_task = min(self._current_task, column.task_count - 1)
        else:
            self._current_task = 0
        self._update_focus()

    def _find_task_position(self, task_id: str) -> tuple[int, int] | None:
        for col_idx, column in enumerate(self.column_widgets):
            task_idx = column.index_of(task_id)
            if task_idx >= 0:
                return col_idx, task_idx
        return None

    # --- Navigation ---

    @property
    def column_widgets(self) -> list[KanbanColumn]:
        return list(self.query(KanbanColumn))

    @property
    def column_count(self) -> int:
        return len(self.column_widgets)

    def _get_column(self, index: int) -> KanbanColumn | None:
        columns = self.column_widgets
        if 0 <= index < len(columns):
            return columns[index]
        return None

    def navigate_column(self, delta: int) -> None:
        """Navigate between columns."""
        new_column = max(0, min(self._current_column + delta, self.column_count - 1))
        if new_column != self._current_column:
            self._current_column = new_column
            column = self._get_column(new_column)
            if column and column.task_count > 0:
                self._current_task = min(self._current_task, column.task_count - 1)
            else:
                self._current_task = 0
            self._update_focus()

    def navigate_task(self, delta: int) -> None:
        """Navigate between tasks in current column."""
        column = self._get_column(self._current_column)
        if column is None or column.task_count == 0:
            return
        new_task = max(0, min(self._current_task + delta, column.task_count - 1))
        if new_task != self._current_task:
            self._current_task = new_task
            self._update_focus()

    def navigate_to_task(self, index: int) -> None:
        """Navigate to specific task index (-1 for last)."""
        column = self._get_column(self._current_column)
        if column is None or column.task_count == 0:
            return
        self._current_task = column.task_count - 1 if index < 0 else min(index, column.task_count - 1)
        self._update_focus()

    def _update_focus(self) -> None:
        column = self._get_column(self._current_column)
        if column and not column.focus_task(self._current_task):
            column.focus()

    def get_current_task(self) -> Task | None:
        column = self._get_column(self._current_column)
        if column:
            return column.get_task(self._current_task)
        return None

    @property
    def current_column(self) -> KanbanColumn | None:
        return self._get_column(self._current_column)

    @property
    def current_column_index(self) -> int:
        return self._current_column

    @property
    def current_task_index(self) -> int:
        return self._current_task

    # --- Drag and drop ---

    def _card_at(self, x: int, y: int) -> TaskCard | None:
        try:
            widget, _ = self.get_widget_at(x, y)
        except NoWidget:
            return None
        node: Widget | None = widget
        while node is not None:
            if isinstance(node, TaskCard):
                return node
            node = node.parent if isinstance(node.parent, Widget) else None
        return None

    def droppables(self) -> list[Droppable]:
        """Columns and visible task cards, as collision targets."""
        targets: list[Droppable] = []
        for column in self.column_widgets:
            targets.append(
                Droppable(column.column_id, DroppableKind.COLUMN, column.column_id, region_rect(column.region))
            )
            # Cards scrolled out of view are clipped away
            visible = column.query_one(CardList).content_region
            for card in column.cards:
                region = card.region.intersection(visible)
                if region.area == 0:
                    continue
                targets.append(
                    Droppable(card.task.id, DroppableKind.TASK, column.column_id, region_rect(region))
                )
        return targets

    def on_mouse_down(self, event: events.MouseDown) -> None:
        if event.button != 1 or self._drag.phase != DragPhase.IDLE:
            return
        card = self._card_at(event.screen_x, event.screen_y)
        if card is None or card.task.is_transient:
            return
        self._pressed_card = card
        self._drag.press(card.task.id, (event.screen_x, event.screen_y), region_rect(card.region))
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._drag.phase == DragPhase.IDLE:
            return
        ghost = self._drag.move((event.screen_x, event.screen_y))
        if ghost is not None:
            task = self._pressed_card.task if self._pressed_card else None
            self.query_one(GhostCard).show_at(task, ghost)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if self._drag.phase == DragPhase.IDLE:
            return
        self.release_mouse()
        self.query_one(GhostCard).hide()
        pressed, self._pressed_card = self._pressed_card, None

        bounds = region_rect(self.query_one("#board-container").region)
        result = self._drag.release((event.screen_x, event.screen_y), self.droppables(), bounds)
        if result is None:
            # Plain click: select the card
            if pressed is not None:
                position = self._find_task_position(pressed.task.id)
                if position is not None:
                    self._current_column, self._current_task = position
                    self._update_focus()
            return
        if result.valid:
            self.app.drop_task(result.task_id, result.target)  # pyrefly: ignore[missing-attribute]

    def action_cancel_drag(self) -> None:
        if self._drag.phase == DragPhase.IDLE:
            return
        self._drag.cancel()
        self._pressed_card = None
        self.release_mouse()
        self.query_one(GhostCard).hide()
