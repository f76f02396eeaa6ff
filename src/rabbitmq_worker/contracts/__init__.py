"""Contract interfaces for the RabbitMQ worker."""

from .consumer_interface import IConsumer
from .event_dispatcher_interface import IEventDispatcher
from .message_decoder_interface import IMessageDecoder
from .publisher_interface import IPublisher
from .rabbitmq_connection_interface import IConnectionRegistry

__all__ = [
    "IConnectionRegistry",
    "IConsumer",
    "IEventDispatcher",
    "IMessageDecoder",
    "IPublisher",
]
