"""Provides queue configuration parameters for RabbitMQ consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from rabbitmq_worker.exceptions import ConfigurationError


@dataclass(frozen=True)
class PrefetchConfig:
    """QoS limits applied to the consuming channel."""

    count: int = 1
    size: int = 0


@dataclass(frozen=True)
class RetryConfig:
    """Retry settings read by the retry policy.

    ``delay`` is in milliseconds and is not applied by the worker itself; it is available to
    an external delayed-requeue mechanism.
    """

    enabled: bool = True
    max_attempts: int = 3
    delay: int = 60000


@dataclass(frozen=True)
class QueueConfig:
    """Encapsulates queue declaration options for RabbitMQ consumers.

    ``exchange`` is the configuration name of the exchange the queue is bound to. When
    ``consumer_tag`` is omitted a tag derived from the queue name and host is used.
    """

    name: str
    exchange: str = "default"
    routing_key: str = ""
    consumer_tag: Optional[str] = None
    passive: bool = False
    durable: bool = True
    exclusive: bool = False
    auto_delete: bool = False
    arguments: Dict[str, Any] = field(default_factory=dict)
    prefetch: PrefetchConfig = field(default_factory=PrefetchConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> QueueConfig:
        if not data.get("name"):
            raise ConfigurationError("Queue configuration requires a name.")

        prefetch = data.get("prefetch") or {}
        retry = data.get("retry") or {}
        try:
            return cls(
                name=data["name"],
                exchange=data.get("exchange", "default"),
                routing_key=data.get("routing_key", ""),
                consumer_tag=data.get("consumer_tag"),
                passive=bool(data.get("passive", False)),
                durable=bool(data.get("durable", True)),
                exclusive=bool(data.get("exclusive", False)),
                auto_delete=bool(data.get("auto_delete", False)),
                arguments=dict(data.get("arguments") or {}),
                prefetch=PrefetchConfig(
                    count=int(prefetch.get("count", 1)),
                    size=int(prefetch.get("size", 0)),
                ),
                retry=RetryConfig(
                    enabled=bool(retry.get("enabled", True)),
                    max_attempts=int(retry.get("max_attempts", 3)),
                    delay=int(retry.get("delay", 60000)),
                ),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid configuration for queue [{data['name']}]: {exc}") from exc
