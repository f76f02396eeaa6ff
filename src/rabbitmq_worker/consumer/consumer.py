"""Default message handler."""

from __future__ import annotations

import logging
from typing import Optional

from rabbitmq_worker.contracts import IConsumer, IMessageDecoder
from rabbitmq_worker.decoder import JSONMessageDecoder
from rabbitmq_worker.message import Message
from rabbitmq_worker.retry import RetryPolicy


class Consumer(IConsumer):
    """Decodes JSON messages, logs them and acknowledges.

    Subclasses override ``consume`` with their own processing. Any exception raised from
    ``consume`` is routed to ``failed``, which hands the message to the retry policy.
    """

    def __init__(
        self,
        retry_policy: RetryPolicy,
        *,
        decoder: Optional[IMessageDecoder] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.retry_policy = retry_policy
        self.decoder = decoder or JSONMessageDecoder()
        self.logger = logger or logging.getLogger(__name__)

    def process(self, message: Message) -> None:
        try:
            self.consume(message)
        except Exception as exc:
            self.failed(message, exc)

    def consume(self, message: Message) -> None:
        data = self.decoder.decode(message.body)
        self.logger.info("Processing RabbitMQ message: %s", data)
        message.ack()

    def failed(self, message: Message, error: Exception) -> None:
        if message.settled:
            self.logger.warning(
                "RabbitMQ message %s failed after it was settled: %s",
                message.delivery_tag,
                error,
            )
            return
        self.retry_policy.handle(message, error)
