"""Defines the contract for decoding message bodies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IMessageDecoder(ABC):
    """Decodes raw message payloads into Python values."""

    @abstractmethod
    def decode(self, payload: bytes) -> Any:
        """Convert raw payload bytes into a Python value."""
