"""
RabbitMQ event publisher.

Uses pika in a thread-pool executor so blocking I/O doesn't stall the
asyncio event loop. A new connection is opened per publish call.
"""
import asyncio
import json
from functools import partial

import pika
import structlog

from socialscope.application.interfaces.event_publisher import EventPublisher
from socialscope.config import settings
from socialscope.domain.events.domain_events import (
    DomainEvent,
    ProfileRegisteredEvent,
    ScrapeRunStartedEvent,
    ScrapeStatusChangedEvent,
)

logger = structlog.get_logger(__name__)

EXCHANGE_NAME = "socialscope.events"


def event_to_routing_key(event: DomainEvent) -> str:
    if isinstance(event, ScrapeStatusChangedEvent):
        return f"profile.scrape.{event.to_status.value}"
    if isinstance(event, ScrapeRunStartedEvent):
        return "profile.scrape.run_started"
    if isinstance(event, ProfileRegisteredEvent):
        return "profile.registered"
    return "event.unknown"


def serialise_event(event: DomainEvent) -> str:
    payload: dict = {  # type: ignore[type-arg]
        "event_type": event_to_routing_key(event),
        "event_id": str(event.event_id),
        "occurred_at": event.occurred_at.isoformat(),
    }

    if isinstance(event, ScrapeStatusChangedEvent):
        payload.update(
            {
                "profile_id": str(event.profile_id),
                "from_status": event.from_status.value if event.from_status else None,
                "to_status": event.to_status.value,
                "generation": event.generation,
                "error": event.error,
            }
        )
    elif isinstance(event, ScrapeRunStartedEvent):
        payload.update(
            {
                "profile_id": str(event.profile_id),
                "run_id": event.run_id,
                "platform": event.platform.value,
                "generation": event.generation,
            }
        )
    elif isinstance(event, ProfileRegisteredEvent):
        payload.update(
            {
                "profile_id": str(event.profile_id),
                "user_id": event.user_id,
                "platform": event.platform.value,
                "username": event.username,
            }
        )

    return json.dumps(payload, default=str)


def _blocking_publish(rabbitmq_url: str, routing_key: str, body: str) -> None:
    connection = pika.BlockingConnection(pika.URLParameters(rabbitmq_url))
    try:
        channel = connection.channel()
        channel.exchange_declare(
            exchange=EXCHANGE_NAME, exchange_type="topic", durable=True
        )
        channel.basic_publish(
            exchange=EXCHANGE_NAME,
            routing_key=routing_key,
            body=body.encode(),
            properties=pika.BasicProperties(
                delivery_mode=pika.DeliveryMode.Persistent,
                content_type="application/json",
            ),
        )
    finally:
        connection.close()


class RabbitMQPublisher(EventPublisher):
    """Publishes domain events to a RabbitMQ topic exchange."""

    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def publish(self, event: DomainEvent) -> None:
        routing_key = event_to_routing_key(event)
        body = serialise_event(event)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(_blocking_publish, self._url, routing_key, body),
            )
            logger.debug("event_published", routing_key=routing_key, event_id=str(event.event_id))
        except Exception as exc:
            # Publishing never fails the request that produced the event.
            logger.error(
                "failed_to_publish_event",
                routing_key=routing_key,
                error=str(exc),
            )
