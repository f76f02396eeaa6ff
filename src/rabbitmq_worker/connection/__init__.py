"""Named RabbitMQ connections and channels."""

from .rabbitmq_connection import ConnectionRegistry

__all__ = ["ConnectionRegistry"]
