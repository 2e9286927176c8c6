"""Terminal user interface."""

from .hold_screen import HoldScreen
from .keyboard_input import KeyboardInputHandler

__all__ = [
    "HoldScreen",
    "KeyboardInputHandler",
]
