"""Configuration model for connections, topology and worker limits."""

from .connection_config import ConnectionConfig, SSLConfig
from .exchange_config import EXCHANGE_TYPES, ExchangeConfig
from .queue_config import PrefetchConfig, QueueConfig, RetryConfig
from .rabbitmq_config import RabbitMQConfig
from .worker_options import WorkerOptions

__all__ = [
    "ConnectionConfig",
    "EXCHANGE_TYPES",
    "ExchangeConfig",
    "PrefetchConfig",
    "QueueConfig",
    "RabbitMQConfig",
    "RetryConfig",
    "SSLConfig",
    "WorkerOptions",
]
