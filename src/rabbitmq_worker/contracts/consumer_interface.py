"""Defines the contract for message handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rabbitmq_worker.message import Message


class IConsumer(ABC):
    """Handles messages delivered from a queue.

    ``process`` must either acknowledge the message or pass any exception on to ``failed``;
    ``failed`` must settle the message with exactly one reject.
    """

    @abstractmethod
    def process(self, message: Message) -> None:
        """Handle a delivered message."""

    @abstractmethod
    def failed(self, message: Message, error: Exception) -> None:
        """Settle a message whose processing raised ``error``."""
