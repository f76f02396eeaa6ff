"""RabbitMQ implementation of the publisher."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import pika
from pika.spec import PERSISTENT_DELIVERY_MODE

from rabbitmq_worker.contracts import IConnectionRegistry, IPublisher
from rabbitmq_worker.topology import TopologyManager

CONTENT_TYPE_JSON = "application/json"


def encode_payload(payload: Any) -> bytes:
    """Text and bytes go out as-is, anything else is serialized to JSON."""
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return json.dumps(payload).encode("utf-8")


class RabbitMQPublisher(IPublisher):
    """Publishes persistent JSON messages to the exchange a queue is bound to.

    Publisher confirms are not awaited; durability relies on the persistent delivery mode
    and a durable queue.
    """

    def __init__(
        self,
        connections: IConnectionRegistry,
        topology: TopologyManager,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.connections = connections
        self.topology = topology
        self.logger = logger or logging.getLogger(__name__)

    def publish(
        self,
        queue_name: str,
        payload: Any,
        *,
        routing_key: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
        message_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        channel = self.connections.get_channel(self.topology.connection_name_for(queue_name))
        setup = self.topology.setup_channel(queue_name, channel)

        properties = pika.BasicProperties(
            content_type=CONTENT_TYPE_JSON,
            delivery_mode=PERSISTENT_DELIVERY_MODE,
            headers=dict(headers) if headers else None,
            message_id=message_id or None,
            correlation_id=correlation_id or None,
        )
        key = routing_key if routing_key is not None else setup.routing_key

        channel.basic_publish(
            exchange=setup.exchange.name,
            routing_key=key,
            body=encode_payload(payload),
            properties=properties,
        )

        self.logger.info(
            "Published message to %s with routing_key=%s message_id=%s",
            setup.exchange.name,
            key,
            message_id,
        )
