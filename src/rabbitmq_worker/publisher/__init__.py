"""Message publishing for configured queues."""

from .rabbitmq_publisher import CONTENT_TYPE_JSON, RabbitMQPublisher, encode_payload

__all__ = ["CONTENT_TYPE_JSON", "RabbitMQPublisher", "encode_payload"]
