"""Board picker screen."""

from __future__ import annotations

import logging

from rich.markup import escape
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, OptionList, Static
from textual.widgets.option_list import Option

from ...api import ApiError, AuthRequiredError
from ...models import Board
from ...services import validate_title
from ..widgets import ConfirmModal, PromptModal

logger = logging.getLogger(__name__)


class BoardPickerScreen(Screen[str | None]):
    """Lists the user's boards. Dismisses with the chosen board id."""

    DEFAULT_CSS = """
    BoardPickerScreen > Vertical {
        padding: 1 2;
    }

    BoardPickerScreen .picker-title {
        text-style: bold;
        margin-bottom: 1;
    }

    BoardPickerScreen #boards {
        height: 1fr;
        border: solid $primary;
    }

    BoardPickerScreen #picker-status {
        color: $text-muted;
        height: auto;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("n", "new_board", "New board", show=True),
        Binding("d", "delete_board", "Delete board", show=True),
        Binding("r", "reload", "Reload", show=True),
        Binding("q", "app.quit", "Quit", show=True),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._boards: list[Board] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            yield Static("Your boards", classes="picker-title")
            yield OptionList(id="boards")
            yield Static("Loading boards…", id="picker-status")
        yield Footer()

    def on_mount(self) -> None:
        self.load_boards()

    @work(thread=True, exclusive=True, exit_on_error=False)
    def load_boards(self) -> None:
        app = self.app
        try:
            boards = app.repository.list_boards()  # pyrefly: ignore[missing-attribute]
        except AuthRequiredError:
            app.call_from_thread(app.require_login)  # pyrefly: ignore[missing-attribute]
            return
        except ApiError as e:
            logger.error("Failed to fetch boards: %s", e)
            app.call_from_thread(self.set_status, f"[red]Failed to fetch boards:[/] {escape(e.message)}")
            return
        app.call_from_thread(self.show_boards, boards)

    def show_boards(self, boards: list[Board]) -> None:
        self._boards = boards
        option_list = self.query_one("#boards", OptionList)
        option_list.clear_options()
        option_list.add_options(
            Option(
                f"[b]{escape(board.title)}[/]" + (f"  [dim]{escape(board.description)}[/]" if board.description else ""),
                id=board.id,
            )
            for board in boards
        )
        if boards:
            self.set_status(escape("[Enter] Open  [n] New board  [d] Delete board"))
            option_list.highlighted = 0
            option_list.focus()
        else:
            self.set_status("No boards yet. Press n to create one.")

    def set_status(self, message: str) -> None:
        self.query_one("#picker-status", Static).update(message)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        if event.option.id:
            self.dismiss(event.option.id)

    def action_reload(self) -> None:
        self.set_status("Loading boards…")
        self.load_boards()

    def action_new_board(self) -> None:
        self.app.push_screen(
            PromptModal(
                "New board",
                placeholder="Board title",
                validator=lambda title: validate_title(title, "Board"),
            ),
            callback=self._handle_new_board,
        )

    def _handle_new_board(self, title: str | None) -> None:
        if title:
            self.create_board(title)

    @work(thread=True, exit_on_error=False)
    def create_board(self, title: str) -> None:
        app = self.app
        try:
            board = app.repository.create_board(title)  # pyrefly: ignore[missing-attribute]
        except AuthRequiredError:
            app.call_from_thread(app.require_login)  # pyrefly: ignore[missing-attribute]
            return
        except ApiError as e:
            logger.error("Failed to create board: %s", e)
            app.notify(f"Failed to create board: {escape(e.message)}", severity="error")
            return
        app.notify("Board created successfully")
        app.call_from_thread(self.dismiss, board.id)

    @property
    def highlighted_board(self) -> Board | None:
        index = self.query_one("#boards", OptionList).highlighted
        if index is None or not 0 <= index < len(self._boards):
            return None
        return self._boards[index]

    def action_delete_board(self) -> None:
        board = self.highlighted_board
        if board is None:
            return
        self.app.push_screen(
            ConfirmModal(
                f"Delete board '{escape(board.title)}'?",
                detail="All of its columns and tasks will be deleted too.",
            ),
            callback=lambda confirmed: self._handle_delete_board(board.id, confirmed),
        )

    def _handle_delete_board(self, board_id: str, confirmed: bool | None) -> None:
        if confirmed:
            self.delete_board(board_id)

    @work(thread=True, exit_on_error=False)
    def delete_board(self, board_id: str) -> None:
        app = self.app
        try:
            app.repository.delete_board(board_id)  # pyrefly: ignore[missing-attribute]
        except AuthRequiredError:
            app.call_from_thread(app.require_login)  # pyrefly: ignore[missing-attribute]
            return
        except ApiError as e:
            logger.error("Failed to delete board %s: %s", board_id, e)
            app.notify(f"Failed to delete board: {escape(e.message)}", severity="error")
            return
        app.notify("Board deleted successfully")
        app.call_from_thread(self.action_reload)
