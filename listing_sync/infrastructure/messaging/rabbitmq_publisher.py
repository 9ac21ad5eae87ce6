"""
RabbitMQ event publisher.

Uses pika in a thread-pool executor so blocking I/O doesn't stall the
asyncio event loop. A new connection is opened per publish call.
"""
import asyncio
import json
from dataclasses import asdict
from enum import Enum
from functools import partial
from typing import Any

import pika
import structlog

from listing_sync.application.interfaces.event_publisher import EventPublisher
from listing_sync.config import settings
from listing_sync.domain.events.domain_events import (
    DomainEvent,
    ListingResetEvent,
    ListingStatusChangedEvent,
    ListingWithdrawnEvent,
)

logger = structlog.get_logger(__name__)

EXCHANGE_NAME = "listing_sync.events"


def event_routing_key(event: DomainEvent) -> str:
    if isinstance(event, ListingStatusChangedEvent):
        return f"listing.status.{event.to_status.value}"
    if isinstance(event, ListingWithdrawnEvent):
        return "listing.withdrawn"
    if isinstance(event, ListingResetEvent):
        return "listing.reset"
    return "event.unknown"


def serialise_event(event: DomainEvent) -> str:
    payload: dict[str, Any] = {"event_type": event_routing_key(event)}
    for key, value in asdict(event).items():
        payload[key] = value.value if isinstance(value, Enum) else value
    payload["event_id"] = str(event.event_id)
    payload["occurred_at"] = event.occurred_at.isoformat()
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
    """Publishes listing events to a RabbitMQ topic exchange."""

    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def publish(self, event: DomainEvent) -> None:
        routing_key = event_routing_key(event)
        body = serialise_event(event)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(_blocking_publish, self._url, routing_key, body),
            )
            logger.debug("event_published", routing_key=routing_key, event_id=str(event.event_id))
        except Exception as exc:
            # Best effort: the listing row is already stored.
            logger.error(
                "failed_to_publish_event",
                routing_key=routing_key,
                error=str(exc),
            )
