"""Idempotent exchange, queue, binding and QoS declaration."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Optional

from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import ChannelClosedByBroker

from rabbitmq_worker.config import ExchangeConfig, QueueConfig, RabbitMQConfig
from rabbitmq_worker.exceptions import ConfigurationConflict

PRECONDITION_FAILED = 406
NOT_FOUND = 404


def default_consumer_tag(queue_name: str) -> str:
    return f"consumer.{queue_name}.{socket.gethostname() or 'unknown'}"


@dataclass(frozen=True)
class ChannelSetup:
    """Resolved descriptors returned after a channel has been prepared for a queue."""

    queue: QueueConfig
    exchange: ExchangeConfig

    @property
    def routing_key(self) -> str:
        return self.queue.routing_key

    @property
    def consumer_tag(self) -> str:
        return self.queue.consumer_tag or default_consumer_tag(self.queue.name)


class TopologyManager:
    """Declares the exchange, queue, binding and QoS a configured queue needs.

    Declarations are repeated on every call; the broker treats an identical redeclaration
    as a no-op and refuses a conflicting one, which surfaces as ``ConfigurationConflict``.
    """

    def __init__(self, config: RabbitMQConfig, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def resolve(self, queue_name: str) -> ChannelSetup:
        queue = self.config.queue(queue_name)
        exchange = self.config.exchange(queue.exchange)
        return ChannelSetup(queue=queue, exchange=exchange)

    def connection_name_for(self, queue_name: str) -> str:
        return self.resolve(queue_name).exchange.connection

    def setup_channel(self, queue_name: str, channel: BlockingChannel) -> ChannelSetup:
        setup = self.resolve(queue_name)
        queue, exchange = setup.queue, setup.exchange

        try:
            channel.exchange_declare(
                exchange=exchange.name,
                exchange_type=exchange.type,
                passive=exchange.passive,
                durable=exchange.durable,
                auto_delete=exchange.auto_delete,
                internal=exchange.internal,
                arguments=exchange.arguments or None,
            )
            self.logger.debug("Declared %s exchange %s", exchange.type, exchange.name)

            channel.queue_declare(
                queue=queue.name,
                passive=queue.passive,
                durable=queue.durable,
                exclusive=queue.exclusive,
                auto_delete=queue.auto_delete,
                arguments=queue.arguments or None,
            )
            self.logger.debug("Declared queue %s", queue.name)

            channel.queue_bind(
                queue=queue.name,
                exchange=exchange.name,
                routing_key=queue.routing_key,
            )
        except ChannelClosedByBroker as exc:
            if exc.reply_code not in (PRECONDITION_FAILED, NOT_FOUND):
                raise
            self.logger.error("Topology for queue [%s] rejected by broker: %s", queue_name, exc.reply_text)
            raise ConfigurationConflict(
                f"Topology for queue [{queue_name}] conflicts with the broker: {exc.reply_text}",
                reply_code=exc.reply_code,
                reply_text=exc.reply_text,
            ) from exc

        channel.basic_qos(
            prefetch_size=queue.prefetch.size,
            prefetch_count=queue.prefetch.count,
            global_qos=False,
        )

        self.logger.info(
            "Queue %s bound to exchange %s with routing key %r",
            queue.name,
            exchange.name,
            queue.routing_key,
        )
        return setup
