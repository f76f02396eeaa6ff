"""Requeue-or-drop decisions driven by the broker's x-death history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from rabbitmq_worker.config import RabbitMQConfig, RetryConfig
from rabbitmq_worker.exceptions import ResourceNotConfigured
from rabbitmq_worker.message import Message


@dataclass(frozen=True)
class RetryDecision:
    requeue: bool
    retry_count: int
    max_attempts: int


class RetryPolicy:
    """Decides whether a failed message goes back to its queue or is dropped.

    The retry count comes only from the ``x-death`` entry for the message's routing key, so
    it survives worker restarts and is shared by every consumer of the queue. Dropped
    messages are rejected without requeue; where they end up is up to the queue's
    dead-letter arguments.
    """

    def __init__(self, config: RabbitMQConfig, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def retry_count(self, message: Message) -> int:
        for entry in message.failure_history():
            if entry.queue == message.routing_key:
                return entry.count
        return 0

    def retry_config(self, message: Message) -> RetryConfig:
        try:
            return self.config.queue_for_routing_key(message.routing_key).retry
        except ResourceNotConfigured:
            return RetryConfig()

    def decide(self, message: Message) -> RetryDecision:
        retry_count = self.retry_count(message)
        retry = self.retry_config(message)
        return RetryDecision(
            requeue=retry.enabled and retry_count < retry.max_attempts,
            retry_count=retry_count,
            max_attempts=retry.max_attempts,
        )

    def handle(self, message: Message, error: BaseException) -> None:
        """Settle ``message`` after ``error``; never raises."""
        try:
            decision = self.decide(message)
        except Exception as exc:
            self.logger.error(
                "RabbitMQ error handling failed: original_exception=%s handling_exception=%s",
                error,
                exc,
            )
            if not message.settled:
                self._reject(message, False, error)
            return

        if not self._reject(message, decision.requeue, error):
            return

        if decision.requeue:
            self.logger.warning(
                "RabbitMQ message processing failed, requeuing: exception=%s retry_count=%s max_retries=%s",
                error,
                decision.retry_count,
                decision.max_attempts,
            )
        else:
            self.logger.error(
                "RabbitMQ message processing failed, max retries reached: exception=%s "
                "retry_count=%s max_retries=%s message=%r",
                error,
                decision.retry_count,
                decision.max_attempts,
                message.body,
            )

    def _reject(self, message: Message, requeue: bool, error: BaseException) -> bool:
        try:
            message.reject(requeue=requeue)
        except Exception as exc:
            self.logger.error(
                "Failed to reject RabbitMQ message %s after %s: %s",
                message.delivery_tag,
                error,
                exc,
            )
            return False
        return True
