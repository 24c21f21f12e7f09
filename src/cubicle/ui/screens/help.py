"""Help screen showing keyboard and mouse shortcuts."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

SECTIONS: list[tuple[str, list[tuple[str, str]]]] = [
    (
        "Navigation",
        [
            ("h / Left", "Previous column"),
            ("l / Right", "Next column"),
            ("k / Up", "Previous task"),
            ("j / Down", "Next task"),
            ("g / G", "First / last task in column"),
        ],
    ),
    (
        "Moving tasks",
        [
            ("H / L", "Move task to previous / next column"),
            ("K / J", "Move task up / down"),
            ("Mouse drag", "Drop on a card or a column"),
        ],
    ),
    (
        "Tasks",
        [
            ("n", "New task in current column"),
            ("Enter", "Preview task"),
            ("e", "Edit in $EDITOR"),
            ("E", "Quick edit form"),
            ("d", "Delete task"),
        ],
    ),
    (
        "Columns",
        [
            ("c", "Add column"),
            ("R", "Rename current column"),
            ("X", "Delete current column"),
        ],
    ),
    (
        "General",
        [
            ("b", "Switch board"),
            ("r", "Reload board"),
            ("?", "Show this help"),
            ("q", "Quit"),
        ],
    ),
]


class HelpScreen(ModalScreen):
    """Modal help screen showing shortcuts."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
        background: $background 60%;
    }

    #help-panel {
        width: 64;
        height: auto;
        max-height: 90%;
        padding: 0 2 1 2;
        border: thick $accent 70%;
        background: $panel;
    }

    #help-panel .heading {
        color: $accent;
        text-style: bold underline;
        margin-top: 1;
    }

    #help-panel .row {
        height: 1;
    }

    #help-panel .keys {
        width: 16;
        color: $warning;
    }

    #help-panel .what {
        width: 1fr;
    }

    #help-hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "dismiss", "Close", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="help-panel"):
            for heading, rows in SECTIONS:
                yield Static(heading, classes="heading")
                for keys, what in rows:
                    with Horizontal(classes="row"):
                        yield Static(keys, classes="keys")
                        yield Static(what, classes="what")
            yield Static("Any key closes this help", id="help-hint")

    def on_key(self, event) -> None:
        event.stop()
        self.dismiss()
