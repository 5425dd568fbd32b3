"""
No-op event publisher, used when RabbitMQ publishing is disabled.
"""
import structlog

from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.domain.events.domain_events import DomainEvent

logger = structlog.get_logger(__name__)


class NoOpEventPublisher(EventPublisher):
    """Discards all events. Useful for testing and local development."""

    async def publish(self, event: DomainEvent) -> None:
        logger.debug("noop_event_discarded", event_type=type(event).__name__)
