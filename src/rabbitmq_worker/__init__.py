"""RabbitMQ worker: named connections, declarative topology, retries and a lifecycle-aware consume loop."""

from .config import (
    ConnectionConfig,
    ExchangeConfig,
    QueueConfig,
    RabbitMQConfig,
    RetryConfig,
    WorkerOptions,
)
from .connection import ConnectionRegistry
from .consumer import Consumer, ConsumerRegistry
from .contracts import IConnectionRegistry, IConsumer, IEventDispatcher
from .events import EventDispatcher
from .exceptions import (
    ConfigurationConflict,
    ConfigurationError,
    MessageAlreadySettled,
    RabbitMQError,
    ResourceNotConfigured,
)
from .manager import RabbitMQManager
from .message import FailureHistoryEntry, Message
from .publisher import RabbitMQPublisher
from .retry import RetryPolicy
from .topology import TopologyManager
from .worker import EXIT_ERROR, EXIT_MEMORY_LIMIT, EXIT_SUCCESS, Worker

__all__ = [
    "ConfigurationConflict",
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionRegistry",
    "Consumer",
    "ConsumerRegistry",
    "EXIT_ERROR",
    "EXIT_MEMORY_LIMIT",
    "EXIT_SUCCESS",
    "EventDispatcher",
    "ExchangeConfig",
    "FailureHistoryEntry",
    "IConnectionRegistry",
    "IConsumer",
    "IEventDispatcher",
    "Message",
    "MessageAlreadySettled",
    "QueueConfig",
    "RabbitMQConfig",
    "RabbitMQError",
    "RabbitMQManager",
    "RabbitMQPublisher",
    "ResourceNotConfigured",
    "RetryConfig",
    "RetryPolicy",
    "TopologyManager",
    "Worker",
    "WorkerOptions",
]
