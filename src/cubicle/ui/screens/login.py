"""Login screen."""

from __future__ import annotations

import logging

from textual import work
from rich.markup import escape
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Static

from ...api import ApiError

logger = logging.getLogger(__name__)


class LoginScreen(Screen[bool]):
    """Email/password form. Dismisses with True once a session is stored."""

    DEFAULT_CSS = """
    LoginScreen {
        align: center middle;
    }

    LoginScreen > Vertical {
        width: 60;
        height: auto;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    LoginScreen .login-title {
        text-style: bold;
        width: 100%;
        text-align: center;
        margin-bottom: 1;
    }

    LoginScreen .field-label {
        color: $text-muted;
        margin-top: 1;
    }

    LoginScreen #login-error {
        color: $error;
        height: auto;
        margin-top: 1;
    }

    LoginScreen Button {
        margin-top: 1;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("escape", "app.quit", "Quit", show=True),
    ]

    def __init__(self, email: str = "") -> None:
        super().__init__()
        self.initial_email = email

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            yield Label("Log in to Cubicle", classes="login-title")
            yield Label("Email", classes="field-label")
            yield Input(value=self.initial_email, placeholder="you@example.com", id="email")
            yield Label("Password", classes="field-label")
            yield Input(password=True, id="password")
            yield Static("", id="login-error")
            yield Button("Log in", id="login", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        target = "#password" if self.initial_email else "#email"
        self.query_one(target, Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        if event.input.id == "email":
            self.query_one("#password", Input).focus()
            return
        self.submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "login":
            self.submit()

    def submit(self) -> None:
        email = self.query_one("#email", Input).value.strip()
        password = self.query_one("#password", Input).value
        if not email:
            self.show_error("Email is required")
            return
        if not password:
            self.show_error("Password is required")
            return
        self.show_error("")
        self.query_one("#login", Button).disabled = True
        self.login(email, password)

    @work(thread=True, exclusive=True, exit_on_error=False)
    def login(self, email: str, password: str) -> None:
        app = self.app
        try:
            user = app.client.login(email, password)  # pyrefly: ignore[missing-attribute]
        except ApiError as e:
            logger.info("Login failed for %s: %s", email, e)
            app.call_from_thread(self._login_failed, e.message)
            return
        app.session.save(app.client.token or "", user)  # pyrefly: ignore[missing-attribute]
        app.call_from_thread(self.dismiss, True)

    def _login_failed(self, message: str) -> None:
        self.show_error(message or "Login failed")
        self.query_one("#login", Button).disabled = False

    def show_error(self, message: str) -> None:
        self.query_one("#login-error", Static).update(escape(message))
