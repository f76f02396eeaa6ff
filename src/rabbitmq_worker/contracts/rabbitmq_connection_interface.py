"""Defines the contract for RabbitMQ connection registries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

from pika.adapters.blocking_connection import BlockingChannel, BlockingConnection


class IConnectionRegistry(ABC):
    """Hands out named blocking connections and one channel per connection name."""

    @abstractmethod
    def get_connection(self, name: str = "default") -> BlockingConnection:
        """Return the open connection registered under ``name``, creating it on first use."""

    @abstractmethod
    def get_channel(self, name: str = "default") -> BlockingChannel:
        """Return the open channel for connection ``name``, creating it on first use."""

    @abstractmethod
    def close(self) -> None:
        """Close every open channel, then every open connection."""

    def __enter__(self) -> IConnectionRegistry:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
