"""Message handlers and their registration table."""

from .consumer import Consumer
from .consumer_registry import ConsumerEntry, ConsumerFactory, ConsumerRegistry

__all__ = ["Consumer", "ConsumerEntry", "ConsumerFactory", "ConsumerRegistry"]
