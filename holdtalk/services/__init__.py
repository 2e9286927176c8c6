"""Services layer for Holdtalk application logic."""

from .dispatcher import EventDispatcher, ScheduledCall
from .outcome_publisher import OutcomePublisher, OUTCOME_TOPIC
from .recording_service import RecordingService

__all__ = [
    "EventDispatcher",
    "ScheduledCall",
    "OutcomePublisher",
    "OUTCOME_TOPIC",
    "RecordingService",
]
