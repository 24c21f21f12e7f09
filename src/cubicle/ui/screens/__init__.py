"""Application screens."""

from .board import BoardScreen
from .boards import BoardPickerScreen
from .help import HelpScreen
from .login import LoginScreen

__all__ = [
    "BoardPickerScreen",
    "BoardScreen",
    "HelpScreen",
    "LoginScreen",
]
