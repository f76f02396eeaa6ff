"""Defines the contract for publishing messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class IPublisher(ABC):
    """Publishes payloads to the exchange a configured queue is bound to."""

    @abstractmethod
    def publish(
        self,
        queue_name: str,
        payload: Any,
        *,
        routing_key: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
        message_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Send ``payload`` towards the queue configured as ``queue_name``."""
