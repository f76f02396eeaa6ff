"""Defines the contract for worker lifecycle notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IEventDispatcher(ABC):
    """Delivers named lifecycle events to observers."""

    @abstractmethod
    def dispatch(self, event: str, *payload: Any) -> None:
        """Notify the listeners of ``event``."""
