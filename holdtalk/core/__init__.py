"""Hold-to-record interaction core."""

from .hold_machine import HoldStateMachine, DEFAULT_HOLD_DURATION_MS

__all__ = [
    "HoldStateMachine",
    "DEFAULT_HOLD_DURATION_MS",
]
