"""Main application entry point for Holdtalk."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from pubsub import pub

from holdtalk import __version__
from holdtalk.audio.capture import CaptureSession
from holdtalk.audio.feedback import NullFeedback, ToneFeedback
from holdtalk.audio.permission import PermissionGate
from holdtalk.audio.playback import WavPlayer
from holdtalk.core.hold_machine import HoldStateMachine
from holdtalk.models.events import HoldOutcome, OutcomeKind
from holdtalk.services.dispatcher import EventDispatcher
from holdtalk.services.outcome_publisher import OutcomePublisher
from holdtalk.services.recording_service import RecordingService
from holdtalk.storage.recording_store import FileRecordingStore

from .config import HoldTalkConfig

logger = logging.getLogger(__name__)


class HoldTalkApp:
    """Wires the state machine, capture, storage and playback together."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None,
                 hold_ms: Optional[int] = None):
        self.config = HoldTalkConfig(config_path)
        if hold_ms is not None:
            self.config.set('hold.duration_ms', hold_ms)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))

    def init(self) -> None:
        logger.info("Initializing services...")

        if self.config.get('feedback.enabled', True):
            feedback = ToneFeedback(
                frequency_hz=self.config.get('feedback.frequency_hz', 880),
                duration_ms=self.config.get('feedback.duration_ms', 200),
                volume=self.config.get('feedback.volume', 0.2),
            )
        else:
            feedback = NullFeedback()

        self.capture = CaptureSession(
            sample_rate=self.config.get('audio.sample_rate'),
            frames_per_buffer=self.config.get('audio.frames_per_buffer', 4096),
            input_device_index=self.config.get('audio.input_device_index'),
            permission=PermissionGate(mode=self.config.get('audio.permission_mode', 'once')),
            feedback=feedback,
        )
        self.capture.open()

        store = FileRecordingStore(
            self.config.get_data_directory(),
            slot=self.config.get('storage.slot', 'latest_recording'),
        )
        self.recordings = RecordingService(store, self.config.get('playback.default_asset'))
        self.publisher = OutcomePublisher()
        self.player = WavPlayer()
        self.dispatcher = EventDispatcher("holdtalk")

        self.machine = HoldStateMachine(
            capture=self.capture,
            recordings=self.recordings,
            scheduler=self.dispatcher,
            hold_duration_ms=self.config.get_hold_duration_ms(),
            on_outcome=self.publisher.publish_outcome,
        )
        pub.subscribe(self.on_outcome, self.publisher.topic)

        self.dispatcher.start()
        logger.info(f"Hold duration: {self.machine.hold_duration_ms}ms")

    def press_start(self) -> None:
        self.dispatcher.post(self.machine.on_press_start)

    def press_end(self) -> None:
        self.dispatcher.post(self.machine.on_press_end)

    def play_prompt(self, name: str) -> None:
        path = self.config.get(f'prompts.{name}')
        if not path:
            logger.warning(f"No prompt configured for '{name}'")
            return
        self.player.play_file(path)

    def on_outcome(self, outcome: HoldOutcome) -> None:
        if outcome.kind is OutcomeKind.PLAYBACK_REQUESTED:
            self.player.play_handle(outcome.handle)
        elif outcome.kind is OutcomeKind.CAPTURE_FAILED:
            logger.warning(f"Recording did not start: {outcome.error}")

    def run_auto(self, duration: float) -> None:
        """Hold the main zone long enough to record ``duration`` seconds, then release."""
        try:
            self.press_start()
            time.sleep(self.machine.hold_duration_ms / 1000.0 + duration)
            self.press_end()
        finally:
            self.cleanup()

    def run_interactive(self) -> None:
        from .ui.hold_screen import HoldScreen

        try:
            HoldScreen(self).run()
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Release the microphone and stop background work."""
        dispatcher = getattr(self, 'dispatcher', None)
        if dispatcher is not None:
            self.dispatcher = None
            if getattr(self, 'machine', None) is not None:
                dispatcher.post(self.machine.reset)
            dispatcher.stop()
            pub.unsubscribe(self.on_outcome, self.publisher.topic)

        # init() may have failed after opening the capture session
        capture = getattr(self, 'capture', None)
        if capture is not None:
            self.capture = None
            capture.close()

        player = getattr(self, 'player', None)
        if player is not None:
            player.stop()
        logger.info("Holdtalk shut down")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/holdtalk.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Holdtalk application starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for Holdtalk application."""
    parser = argparse.ArgumentParser(
        description="Holdtalk - hold to record, tap to play back",
        epilog="Keys: space=hold/release, y=yes prompt, n=no prompt, q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config)"
    )

    parser.add_argument(
        "--hold-ms",
        type=int,
        help="Hold duration before recording starts, in milliseconds (overrides config)"
    )

    parser.add_argument(
        "--auto",
        action="store_true",
        help="Record one message for the given duration, then exit"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Seconds to record in auto mode (default: 5)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Holdtalk v{__version__}"
    )

    args = parser.parse_args()

    app = HoldTalkApp(args.config, args.log_level, args.hold_ms)
    try:
        app.init()
        if args.auto:
            app.run_auto(args.duration)
        else:
            app.run_interactive()
    except KeyboardInterrupt:
        app.cleanup()
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        app.cleanup()
        sys.exit(1)


if __name__ == "__main__":
    main()
