"""Top-level configuration consumed by the worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from rabbitmq_worker.exceptions import ConfigurationError, ResourceNotConfigured

from .connection_config import ConnectionConfig
from .exchange_config import ExchangeConfig
from .queue_config import QueueConfig
from .worker_options import WorkerOptions


@dataclass(frozen=True)
class RabbitMQConfig:
    """Named connections, exchanges and queues plus worker defaults.

    Keys of each mapping are configuration names; they are what callers pass around
    (``publish("default", ...)``), not necessarily the broker-side names.
    """

    connections: Dict[str, ConnectionConfig] = field(default_factory=dict)
    exchanges: Dict[str, ExchangeConfig] = field(default_factory=dict)
    queues: Dict[str, QueueConfig] = field(default_factory=dict)
    worker: WorkerOptions = field(default_factory=WorkerOptions)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RabbitMQConfig:
        return cls(
            connections={
                name: ConnectionConfig.from_mapping(entry)
                for name, entry in (data.get("connections") or {}).items()
            },
            exchanges={
                name: ExchangeConfig.from_mapping(entry)
                for name, entry in (data.get("exchanges") or {}).items()
            },
            queues={
                name: QueueConfig.from_mapping(entry)
                for name, entry in (data.get("queues") or {}).items()
            },
            worker=WorkerOptions.from_mapping(data.get("worker") or {}),
        )

    def connection(self, name: str) -> ConnectionConfig:
        try:
            return self.connections[name]
        except KeyError:
            raise ConfigurationError(f"Connection [{name}] not configured.") from None

    def exchange(self, name: str) -> ExchangeConfig:
        try:
            return self.exchanges[name]
        except KeyError:
            raise ResourceNotConfigured("exchange", name) from None

    def queue(self, name: str) -> QueueConfig:
        try:
            return self.queues[name]
        except KeyError:
            raise ResourceNotConfigured("queue", name) from None

    def queue_for_routing_key(self, routing_key: str) -> QueueConfig:
        """Resolve a queue by configuration name first, then by broker queue name."""
        if routing_key in self.queues:
            return self.queues[routing_key]
        for queue in self.queues.values():
            if queue.name == routing_key:
                return queue
        raise ResourceNotConfigured("queue", routing_key)
