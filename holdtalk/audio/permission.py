"""Microphone permission gate."""

import logging
from typing import Callable, Optional

from ..errors import PermissionDenied

logger = logging.getLogger(__name__)

PERMISSION_MODES = ("once", "per_recording")


class PermissionGate:
    """Asks for microphone access once, or before every recording."""

    def __init__(self, request: Optional[Callable[[], bool]] = None, mode: str = "once"):
        """Initialize permission gate.

        Args:
            request: Callable asking for access, returns True if granted.
                     Defaults to granting access.
            mode: "once" caches a grant, "per_recording" asks every time
        """
        if mode not in PERMISSION_MODES:
            raise ValueError(f"Unknown permission mode: {mode}")
        self.request = request or (lambda: True)
        self.mode = mode
        self.granted = False

    def ensure(self) -> None:
        """Raise PermissionDenied unless microphone access is granted."""
        if self.granted and self.mode == "once":
            return

        granted = bool(self.request())
        if not granted:
            self.granted = False
            logger.warning("Microphone permission denied")
            raise PermissionDenied("Microphone permission required")

        self.granted = True
        logger.debug("Microphone permission granted")
