"""Exception hierarchy for the RabbitMQ worker."""

from __future__ import annotations


class RabbitMQError(Exception):
    """Base class for errors raised by rabbitmq_worker."""


class ConfigurationError(RabbitMQError):
    """Raised when a connection, exchange or queue is missing or invalid."""


class ResourceNotConfigured(ConfigurationError):
    """Raised when a queue or exchange name has no configuration entry."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind.capitalize()} [{name}] not configured.")
        self.kind = kind
        self.name = name


class ConfigurationConflict(RabbitMQError):
    """Raised when the broker refuses a declaration that differs from an existing resource."""

    def __init__(self, message: str, *, reply_code: int = 0, reply_text: str = "") -> None:
        super().__init__(message)
        self.reply_code = reply_code
        self.reply_text = reply_text


class MessageAlreadySettled(RabbitMQError):
    """Raised when a message is acknowledged or rejected more than once."""
