"""Single-line text prompt, used for column and board titles."""

from collections.abc import Callable

from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Input, Label, Static

from ...errors import ValidationError


class PromptModal(ModalScreen[str | None]):
    """Ask for one value. Returns the stripped text, or None if cancelled.

    The optional validator raises ValidationError; its first message is
    shown under the input and the modal stays open.
    """

    DEFAULT_CSS = """
    PromptModal {
        align: center middle;
    }

    PromptModal > Vertical {
        width: 60;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $primary;
    }

    PromptModal .prompt-title {
        text-style: bold;
        margin-bottom: 1;
    }

    PromptModal .field-error {
        color: $error;
        height: auto;
    }

    PromptModal .prompt-hint {
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(
        self,
        title: str,
        value: str = "",
        placeholder: str = "",
        validator: Callable[[str], object] | None = None,
    ) -> None:
        super().__init__()
        self.prompt_title = title
        self.initial_value = value
        self.placeholder = placeholder
        self.validator = validator

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Label(self.prompt_title, classes="prompt-title")
            yield Input(value=self.initial_value, placeholder=self.placeholder, id="prompt-input")
            yield Static("", id="prompt-error", classes="field-error")
            yield Static("[Enter] Save  [Esc] Cancel", classes="prompt-hint")

    def on_mount(self) -> None:
        self.query_one("#prompt-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        value = event.value.strip()
        if self.validator is not None:
            try:
                self.validator(value)
            except ValidationError as e:
                self.show_error(next(iter(e.errors.values()), str(e)))
                return
        self.dismiss(value)

    def show_error(self, message: str) -> None:
        self.query_one("#prompt-error", Static).update(escape(message))

    def action_cancel(self) -> None:
        self.dismiss(None)
