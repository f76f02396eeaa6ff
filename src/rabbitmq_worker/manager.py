"""Facade wiring connections, topology, publishing and consumers together."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Callable, List, Mapping, Optional, Type, Union

from pika.adapters.blocking_connection import BlockingChannel
from pika.spec import Basic, BasicProperties

from .config import RabbitMQConfig
from .connection import ConnectionRegistry
from .consumer import Consumer, ConsumerEntry, ConsumerRegistry
from .contracts import IConnectionRegistry, IConsumer
from .message import Message
from .publisher import RabbitMQPublisher
from .retry import RetryPolicy
from .topology import ChannelSetup, TopologyManager

MessageCallback = Callable[[Message], None]


class RabbitMQManager:
    """Owns one connection registry and everything that shares it."""

    def __init__(
        self,
        config: RabbitMQConfig,
        *,
        connections: Optional[IConnectionRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.connections = connections or ConnectionRegistry(config.connections)
        self.topology = TopologyManager(config)
        self.retry_policy = RetryPolicy(config)
        self.publisher = RabbitMQPublisher(self.connections, self.topology)
        self.consumers = ConsumerRegistry(default_factory=lambda: Consumer(self.retry_policy))

    def register_consumer(self, queue: str, consumer: ConsumerEntry) -> None:
        self.consumers.register(queue, consumer)

    def get_consumer(self, queue: str) -> IConsumer:
        return self.consumers.get(queue)

    def channel_for(self, queue_name: str) -> BlockingChannel:
        return self.connections.get_channel(self.topology.connection_name_for(queue_name))

    def setup_channel(self, queue_name: str, channel: BlockingChannel) -> ChannelSetup:
        return self.topology.setup_channel(queue_name, channel)

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
        self.publisher.publish(
            queue_name,
            payload,
            routing_key=routing_key,
            headers=headers,
            message_id=message_id,
            correlation_id=correlation_id,
        )

    def consume(
        self,
        queue_name: str,
        callback: Union[IConsumer, MessageCallback],
        *,
        consumer_tag: Optional[str] = None,
        timeout: Optional[float] = None,
        max_messages: int = 0,
    ) -> int:
        """Consume from ``queue_name`` without the worker's lifecycle limits.

        Returns after ``max_messages`` deliveries (0 for no limit), or after ``timeout``
        seconds pass without a delivery. Returns the number of messages handled.
        """
        handle: MessageCallback = callback.process if isinstance(callback, IConsumer) else callback
        channel = self.channel_for(queue_name)
        setup = self.setup_channel(queue_name, channel)
        pending: List[Message] = []

        def on_message(
            ch: BlockingChannel,
            method: Basic.Deliver,
            properties: BasicProperties,
            body: bytes,
        ) -> None:
            pending.append(
                Message(channel=ch, method=method, properties=properties, body=body, queue=queue_name)
            )

        tag = channel.basic_consume(
            queue=setup.queue.name,
            on_message_callback=on_message,
            consumer_tag=consumer_tag or setup.consumer_tag,
        )
        self.logger.info("Started consuming from %s", setup.queue.name)

        processed = 0
        try:
            while max_messages == 0 or processed < max_messages:
                if not pending:
                    channel.connection.process_data_events(time_limit=timeout)
                if not pending:
                    if timeout is not None:
                        break
                    continue
                handle(pending.pop(0))
                processed += 1
        finally:
            if channel.is_open:
                channel.basic_cancel(tag)

        return processed

    def close(self) -> None:
        self.connections.close()

    def __enter__(self) -> RabbitMQManager:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
