"""cubicle TUI Application."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from rich.markup import escape
from textual import work
from textual.app import App
from textual.binding import Binding
from textual.worker import Worker, WorkerState

from .api import ApiClient, AuthRequiredError
from .config import Settings
from .dnd import Droppable
from .errors import BoardLoadError, ValidationError
from .models import Task, TaskDraft
from .repositories import ApiRepository, BoardRepositoryProtocol
from .services import BoardStore, SessionService, TaskService, validate_title
from .ui.screens import BoardPickerScreen, BoardScreen, HelpScreen, LoginScreen
from .ui.widgets import ConfirmModal, PromptModal, TaskFormModal, TaskPreviewModal

logger = logging.getLogger(__name__)


class CubicleApp(App):
    """cubicle - Terminal Kanban client."""

    TITLE = "cubicle"

    CSS_PATH = "ui/styles.tcss"

    BINDINGS = [
        # Core bindings
        Binding("q", "quit", "Quit", show=True),
        Binding("?", "help", "Help", show=True),
        Binding("r", "refresh", "Reload", show=True),
        Binding("b", "switch_board", "Boards", show=True),
        # Navigation - vim style
        Binding("h", "nav_left", "← Column", show=False),
        Binding("j", "nav_down", "↓ Task", show=False),
        Binding("k", "nav_up", "↑ Task", show=False),
        Binding("l", "nav_right", "→ Column", show=False),
        # Navigation - arrow keys
        Binding("left", "nav_left", "← Column", show=False),
        Binding("down", "nav_down", "↓ Task", show=False),
        Binding("up", "nav_up", "↑ Task", show=False),
        Binding("right", "nav_right", "→ Column", show=False),
        # Jump navigation
        Binding("g", "nav_first", "First", show=False),
        Binding("G", "nav_last", "Last", show=False),
        # Task actions
        Binding("n", "new_task", "New", show=True),
        Binding("e", "edit_task", "Edit", show=True),
        Binding("E", "quick_edit_task", "Quick edit", show=False),
        Binding("enter", "preview_task", "Preview", show=False),
        Binding("H", "move_task_left", "Move ←", show=False),
        Binding("L", "move_task_right", "Move →", show=False),
        Binding("shift+left", "move_task_left", "Move ←", show=False),
        Binding("shift+right", "move_task_right", "Move →", show=False),
        Binding("K", "move_task_up", "Move ↑", show=False),
        Binding("J", "move_task_down", "Move ↓", show=False),
        Binding("shift+up", "move_task_up", "Move ↑", show=False),
        Binding("shift+down", "move_task_down", "Move ↓", show=False),
        Binding("d", "delete_task", "Delete", show=False),
        # Column actions
        Binding("c", "new_column", "Column", show=True),
        Binding("R", "rename_column", "Rename column", show=False),
        Binding("X", "delete_column", "Delete column", show=False),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        repository: BoardRepositoryProtocol | None = None,
    ) -> None:
        super().__init__()
        self.settings = settings or Settings()
        self.store: BoardStore | None = None
        self._write_lock = threading.Lock()
        self._init_services(repository)

    def _init_services(self, repository: BoardRepositoryProtocol | None) -> None:
        """Initialize session, API client and services."""
        self.session = SessionService(self.settings.session_file)
        self.client = ApiClient(
            self.settings.api_url,
            token=self.session.token,
            timeout=self.settings.timeout,
            on_token_change=self.session.update_token,
        )
        self.repository: BoardRepositoryProtocol = repository or ApiRepository(self.client)
        self.task_service = TaskService(self.settings.editor)

    def on_mount(self) -> None:
        self._route()

    # --- Routing ---

    def _route(self) -> None:
        """Login first, then the configured board or the board picker."""
        if not self.client.is_authenticated:
            self.require_login()
        elif self.settings.board_id:
            self.open_board(self.settings.board_id)
        else:
            self.show_board_picker()

    def require_login(self) -> None:
        """Show the login screen, unless it is already up."""
        if isinstance(self.screen, LoginScreen):
            return
        email = self.session.user.get("email", "")
        self.push_screen(LoginScreen(email), callback=self._handle_login)

    def _handle_login(self, logged_in: bool | None) -> None:
        if not logged_in:
            return
        self.notify(f"Logged in as {escape(self.session.user_display_name)}", timeout=2)
        if self.store is not None and self._board_screen() is not None:
            # Session expired mid-board: fetch it again
            self.load_board()
        else:
            self._route()

    def show_board_picker(self) -> None:
        self.push_screen(BoardPickerScreen(), callback=self._handle_board_choice)

    def _handle_board_choice(self, board_id: str | None) -> None:
        if board_id:
            self.open_board(board_id)

    def open_board(self, board_id: str) -> None:
        """Create a store for the board and show it."""
        if self.store is not None:
            self.store.remove_listener(self._on_store_changed)
        self.store = BoardStore(self.repository, board_id, notify=self._notify_from_store)
        self.store.add_listener(self._on_store_changed)
        logger.info("Opening board %s", board_id)
        self.push_screen(BoardScreen(self.store))
        self.load_board()

    def _board_screen(self) -> BoardScreen | None:
        """The active board screen, if it is on top."""
        screen = self.screen
        return screen if isinstance(screen, BoardScreen) else None

    def _find_board_screen(self) -> BoardScreen | None:
        """The board screen anywhere in the stack (it may sit under a modal)."""
        for screen in reversed(self.screen_stack):
            if isinstance(screen, BoardScreen):
                return screen
        return None

    # --- Store plumbing ---

    def _on_ui_thread(self, callback: Callable[..., Any], *args: Any) -> None:
        if threading.current_thread() is threading.main_thread():
            callback(*args)
        else:
            self.call_from_thread(callback, *args)

    def _notify_from_store(self, message: str, **kwargs: Any) -> None:
        """Store messages can quote server text, which must not be read as markup."""
        self.notify(escape(message), **kwargs)

    def _on_store_changed(self) -> None:
        self._on_ui_thread(self._render_board)

    def _render_board(self) -> None:
        screen = self._find_board_screen()
        if screen is not None:
            screen.render_board()

    def _show_load_error(self) -> None:
        screen = self._find_board_screen()
        if screen is not None:
            screen.show_load_error()

    @work(thread=True, exclusive=True, group="load", exit_on_error=False)
    def load_board(self) -> None:
        """Fetch the board in the background."""
        if self.store is None:
            return
        try:
            self.store.load()
        except BoardLoadError:
            self.call_from_thread(self._show_load_error)
        except AuthRequiredError:
            self.call_from_thread(self.require_login)

    @work(thread=True, group="write", exit_on_error=False)
    def run_write(self, operation: Callable[..., Any], *args: Any) -> None:
        """Run a store write off the UI thread. Writes go out one at a time."""
        with self._write_lock:
            try:
                operation(*args)
            except AuthRequiredError:
                self.call_from_thread(self.require_login)
            except ValidationError as e:
                self.notify(escape(next(iter(e.errors.values()), str(e))), severity="warning")

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        if event.state == WorkerState.ERROR:
            logger.error("Background task failed", exc_info=event.worker.error)
            self.notify(f"Unexpected error: {event.worker.error}", severity="error")

    # --- General actions ---

    def action_refresh(self) -> None:
        """Reload the board from the server."""
        if self._board_screen() is not None:
            self.load_board()

    def action_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_switch_board(self) -> None:
        if self._board_screen() is None:
            return
        self.pop_screen()
        self.show_board_picker()

    # Navigation actions
    def action_nav_left(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_column(-1)

    def action_nav_right(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_column(1)

    def action_nav_up(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_task(-1)

    def action_nav_down(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_task(1)

    def action_nav_first(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_to_task(0)

    def action_nav_last(self) -> None:
        screen = self._board_screen()
        if screen:
            screen.navigate_to_task(-1)

    # --- Moving tasks ---

    def _current_task(self) -> tuple[BoardScreen, Task] | None:
        screen = self._board_screen()
        if screen is None or self.store is None or not self.store.is_loaded:
            return None
        task = screen.get_current_task()
        if task is None:
            return None
        return screen, task

    def action_move_task_left(self) -> None:
        """Move current task to the previous column, keeping its index."""
        self._move_across(-1)

    def action_move_task_right(self) -> None:
        """Move current task to the next column, keeping its index."""
        self._move_across(1)

    def _move_across(self, delta: int) -> None:
        current = self._current_task()
        if current is None or self.store is None:
            return
        screen, task = current
        if task.is_transient:
            self.notify("Task is still being saved", severity="warning", timeout=2)
            return

        state = self.store.state
        target_index = screen.current_column_index + delta
        if state is None or not 0 <= target_index < len(state.columns):
            return
        target = state.columns[target_index]

        move = self.store.apply_move(task.id, target.id, screen.current_task_index)
        if move is None:
            return
        screen.render_board(follow_task_id=task.id)
        self.run_write(self.store.persist_move, move)
        self.notify(f"Moved to {escape(target.title)}", timeout=2)

    def action_move_task_up(self) -> None:
        """Move current task up in its column."""
        self._reorder(-1)

    def action_move_task_down(self) -> None:
        """Move current task down in its column."""
        self._reorder(1)

    def _reorder(self, delta: int) -> None:
        current = self._current_task()
        if current is None or self.store is None:
            return
        screen, task = current
        new_index = screen.current_task_index + delta
        if new_index < 0:
            return
        move = self.store.apply_reorder(task.id, new_index)
        if move is None:
            return
        screen.render_board(follow_task_id=task.id)
        self.run_write(self.store.persist_move, move)

    def drop_task(self, task_id: str, target: Droppable | None) -> None:
        """Finish a mouse drag: apply locally, persist in the background."""
        if self.store is None or not self.store.is_loaded:
            return
        move = self.store.apply_drop(task_id, target)
        if move is None:
            return
        screen = self._board_screen()
        if screen is not None:
            screen.render_board(follow_task_id=task_id)
        self.run_write(self.store.persist_move, move)

    # --- Task actions ---

    def action_new_task(self) -> None:
        """Create a task in the current column."""
        screen = self._board_screen()
        if screen is None or self.store is None or not self.store.is_loaded:
            return
        column = screen.current_column
        if column is None:
            self.notify("Add a column first", severity="warning", timeout=2)
            return
        self.push_screen(
            TaskFormModal(column_title=column.title),
            callback=lambda draft: self._handle_new_task(column.column_id, draft),
        )

    def _handle_new_task(self, column_id: str, draft: TaskDraft | None) -> None:
        if draft is None or self.store is None:
            return
        self.run_write(self.store.create_task, column_id, draft)

    def _column_title(self, task: Task) -> str | None:
        state = self.store.state if self.store else None
        column = state.get_column(task.column_id) if state else None
        return column.title if column else None

    def action_edit_task(self) -> None:
        """Edit the current task in the external editor."""
        current = self._current_task()
        if current is None or self.store is None:
            return
        _, task = current
        if task.is_transient:
            self.notify("Task is still being saved", severity="warning", timeout=2)
            return
        state = self.store.state
        members = state.board.members if state else []

        try:
            with self.suspend():
                draft = self.task_service.edit_task(task, members, self._column_title(task))
        except ValidationError as e:
            self.notify(f"Task not saved: {escape('; '.join(e.errors.values()))}", severity="error")
            return

        if draft is None:
            return
        self.run_write(self.store.update_task, task.id, draft)

    def action_quick_edit_task(self) -> None:
        """Edit title, priority, due date and description in a form."""
        current = self._current_task()
        if current is None or self.store is None:
            return
        _, task = current
        if task.is_transient:
            return
        self.push_screen(
            TaskFormModal(task, column_title=self._column_title(task) or ""),
            callback=lambda draft: self._handle_task_update(task.id, draft),
        )

    def _handle_task_update(self, task_id: str, draft: TaskDraft | None) -> None:
        if draft is None or self.store is None:
            return
        self.run_write(self.store.update_task, task_id, draft)

    def action_preview_task(self) -> None:
        """Show task preview modal."""
        current = self._current_task()
        if current is None or self.store is None:
            return
        _, task = current
        store = self.store

        def toggle(index: int) -> None:
            self.run_write(store.toggle_subtask, task.id, index)

        self.push_screen(
            TaskPreviewModal(
                task,
                column_title=self._column_title(task),
                on_toggle=None if task.is_transient else toggle,
            ),
            callback=self._handle_preview_result,
        )

    def _handle_preview_result(self, edit_requested: bool | None) -> None:
        if edit_requested:
            self.action_edit_task()

    def action_delete_task(self) -> None:
        """Delete the current task (with confirmation)."""
        current = self._current_task()
        if current is None:
            return
        _, task = current
        if task.is_transient:
            return
        self.push_screen(
            ConfirmModal(f"Delete '{escape(task.title)}'?"),
            callback=lambda confirmed: self._handle_delete_confirm(task.id, confirmed),
        )

    def _handle_delete_confirm(self, task_id: str, confirmed: bool | None) -> None:
        if confirmed and self.store is not None:
            self.run_write(self.store.delete_task, task_id)

    # --- Column actions ---

    def action_new_column(self) -> None:
        if self._board_screen() is None or self.store is None or not self.store.is_loaded:
            return
        self.push_screen(
            PromptModal("New column", placeholder="Column title", validator=validate_title),
            callback=self._handle_new_column,
        )

    def _handle_new_column(self, title: str | None) -> None:
        if title and self.store is not None:
            self.run_write(self.store.create_column, title)

    def action_rename_column(self) -> None:
        screen = self._board_screen()
        column = screen.current_column if screen else None
        if column is None:
            return
        self.push_screen(
            PromptModal("Rename column", value=column.title, validator=validate_title),
            callback=lambda title: self._handle_rename_column(column.column_id, title),
        )

    def _handle_rename_column(self, column_id: str, title: str | None) -> None:
        if title and self.store is not None:
            self.run_write(self.store.rename_column, column_id, title)

    def action_delete_column(self) -> None:
        screen = self._board_screen()
        column = screen.current_column if screen else None
        if column is None:
            return
        detail = f"Its {column.task_count} task(s) will be deleted too." if column.task_count else ""
        self.push_screen(
            ConfirmModal(f"Delete column '{escape(column.title)}'?", detail=detail),
            callback=lambda confirmed: self._handle_delete_column(column.column_id, confirmed),
        )

    def _handle_delete_column(self, column_id: str, confirmed: bool | None) -> None:
        if confirmed and self.store is not None:
            self.run_write(self.store.delete_column, column_id)


def run(settings: Settings | None = None) -> None:
    """Run the cubicle application."""
    app = CubicleApp(settings)
    try:
        app.run()
    finally:
        app.client.close()
