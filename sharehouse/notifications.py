"""Best-effort broadcast of booking lifecycle events."""
from __future__ import annotations

import json
import logging
import threading
from functools import lru_cache
from typing import Any, Dict, List, Protocol, Tuple

import pika
from circuitbreaker import CircuitBreakerError, circuit
from pika.exceptions import AMQPError

from .config import get_settings

logger = logging.getLogger(__name__)

NEW_BOOKING = "newBooking"
UPDATED_BOOKING = "updatedBooking"
DELETED_BOOKING = "deletedBooking"


class NotificationSink(Protocol):
    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        ...


class RabbitMQNotificationSink:
    """Publishes ``{"event", "payload"}`` messages on a durable queue."""

    def __init__(self, host: str, queue: str) -> None:
        self.host = host
        self.queue = queue

    @circuit(failure_threshold=5, recovery_timeout=30, expected_exception=(AMQPError, OSError))
    def _publish(self, body: str) -> None:
        connection = pika.BlockingConnection(pika.ConnectionParameters(host=self.host))
        try:
            channel = connection.channel()
            channel.queue_declare(queue=self.queue, durable=True)
            channel.basic_publish(
                exchange="",
                routing_key=self.queue,
                body=body,
                properties=pika.BasicProperties(delivery_mode=2, content_type="application/json"),
            )
        finally:
            connection.close()

    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        body = json.dumps({"event": event_name, "payload": payload})
        try:
            self._publish(body)
        except CircuitBreakerError:
            logger.warning("[RabbitMQ] circuit open, dropping %s event", event_name)
        except (AMQPError, OSError) as exc:
            logger.warning("[RabbitMQ] could not publish %s event: %s", event_name, exc)
        else:
            logger.info("[RabbitMQ] published %s event", event_name)


class InMemoryNotificationSink:
    """Keeps emitted events in memory. Used in tests and local development."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.events.append((event_name, payload))

    def named(self, event_name: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.events if name == event_name]

    def clear(self) -> None:
        with self._lock:
            self.events.clear()


class NullNotificationSink:
    def emit(self, event_name: str, payload: Dict[str, Any]) -> None:
        logger.debug("notifications disabled, skipping %s", event_name)


@lru_cache
def get_notification_sink() -> NotificationSink:
    settings = get_settings()
    if settings.notifications_backend == "rabbitmq":
        return RabbitMQNotificationSink(settings.rabbitmq_host, settings.rabbitmq_queue)
    if settings.notifications_backend == "memory":
        return InMemoryNotificationSink()
    return NullNotificationSink()
