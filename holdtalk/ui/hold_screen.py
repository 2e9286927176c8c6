"""Terminal front-end: one hold zone and two prompt zones mapped to keys."""

import logging

from pubsub import pub
from rich.console import Console

from ..models.events import HoldOutcome, OutcomeKind
from .keyboard_input import KeyboardInputHandler

logger = logging.getLogger(__name__)

HOLD_KEY = " "
YES_KEY = "y"
NO_KEY = "n"
QUIT_KEYS = ("q", "\x03")


class HoldScreen:
    """Maps keys to zone gestures and shows outcomes.

    A terminal cannot report key release, so the space bar toggles: the
    first press starts holding the main zone, the second releases it.
    """

    def __init__(self, app):
        """Initialize hold screen.

        Args:
            app: HoldTalkApp whose zones the keys drive
        """
        self.app = app
        self.console = Console()
        self.holding = False
        self.input_handler = KeyboardInputHandler(self.handle_key)
        pub.subscribe(self.show_outcome, app.publisher.topic)

    def run(self) -> None:
        """Show the help line and block until the user quits."""
        self.console.print("🎙️  Holdtalk", style="bold blue")
        self.console.print(
            f"space = hold/release main zone (records after "
            f"{self.app.machine.hold_duration_ms}ms), y = yes, n = no, q = quit"
        )
        self.input_handler.start()
        try:
            self.input_handler.wait()
        finally:
            self.input_handler.stop()
            if self.holding:
                self.app.press_end()
                self.holding = False

    def handle_key(self, key: str) -> bool:
        """Handle one keypress; return False to quit."""
        if key in QUIT_KEYS:
            return False

        if key == HOLD_KEY:
            if self.holding:
                self.holding = False
                self.app.press_end()
                self.console.print("⏹️  released", style="yellow")
            else:
                self.holding = True
                self.app.press_start()
                self.console.print("⏳ holding...", style="cyan")
        elif key == YES_KEY:
            self.app.play_prompt("yes")
        elif key == NO_KEY:
            self.app.play_prompt("no")
        return True

    def show_outcome(self, outcome: HoldOutcome) -> None:
        if outcome.kind is OutcomeKind.RECORDING_SAVED:
            suffix = "" if outcome.handle.durable else " (not saved to disk)"
            self.console.print(f"✅ Recording saved{suffix}", style="green")
        elif outcome.kind is OutcomeKind.PLAYBACK_REQUESTED:
            source = "default message" if outcome.handle.is_default else "last recording"
            self.console.print(f"▶️  Playing {source}", style="blue")
        elif outcome.kind is OutcomeKind.CAPTURE_FAILED:
            self.console.print(f"❌ Microphone unavailable: {outcome.error}", style="bold red")
        elif outcome.error is not None:
            self.console.print(f"⚠️  Recording discarded: {outcome.error}", style="yellow")
