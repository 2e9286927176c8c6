"""Cross-platform single-key input for the terminal screen."""

import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Reads single keypresses on a background thread and forwards them."""

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self.finished = threading.Event()

    def start(self) -> None:
        """Start the keyboard input handler."""
        if self.running:
            return

        self.running = True
        self.finished.clear()
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        """Stop the keyboard input handler."""
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def wait(self) -> None:
        """Block until the callback asks to quit or input ends."""
        self.finished.wait()

    def _input_loop(self) -> None:
        logger.debug("Starting keyboard input loop")
        try:
            while self.running:
                key = self._get_key()
                if key:
                    logger.debug(f"Key detected: {key!r}")
                    if not self.callback(key):
                        logger.info("Callback returned False, leaving input loop")
                        break
                time.sleep(0.02)
        finally:
            self.running = False
            self.finished.set()
            logger.debug("Keyboard input loop ended")

    def _get_key(self) -> Optional[str]:
        """Get a single keypress in a cross-platform way."""
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        import msvcrt
        if msvcrt.kbhit():
            return msvcrt.getch().decode('utf-8', errors='ignore').lower()
        return None

    def _get_key_unix(self) -> Optional[str]:
        import select
        import tty
        import termios

        if not select.select([sys.stdin], [], [], 0.1)[0]:
            return None

        # Raw mode for the duration of one read only
        old_settings = termios.tcgetattr(sys.stdin)
        try:
            tty.setraw(sys.stdin.fileno())
            key = sys.stdin.read(1)
        finally:
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)

        if key == '':
            # stdin closed
            self.running = False
            return None
        return key.lower()
