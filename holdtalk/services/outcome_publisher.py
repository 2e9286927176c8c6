"""Publishes gesture outcomes to the presentation layer via pubsub."""

import logging

from pubsub import pub

from ..models.events import HoldOutcome

logger = logging.getLogger(__name__)

OUTCOME_TOPIC = "hold.outcome"


class OutcomePublisher:
    """Publishes HoldOutcome events using pubsub.pub."""

    def __init__(self, topic: str = OUTCOME_TOPIC):
        """Initialize outcome publisher.

        Args:
            topic: Pub/sub topic name for outcomes
        """
        self.topic = topic
        logger.info(f"OutcomePublisher initialized with topic: {topic}")

    def publish_outcome(self, outcome: HoldOutcome) -> None:
        """Publish an outcome to the pub/sub topic."""
        pub.sendMessage(self.topic, outcome=outcome)
        logger.debug(f"Published outcome: {outcome.kind.value}")
