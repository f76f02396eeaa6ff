"""Explicit queue-to-handler registration."""

from __future__ import annotations

from typing import Callable, Dict, Union

from rabbitmq_worker.contracts import IConsumer

ConsumerFactory = Callable[[], IConsumer]
ConsumerEntry = Union[IConsumer, ConsumerFactory]


class ConsumerRegistry:
    """Maps queue configuration names to handlers.

    Entries are either handler instances or zero-argument factories; factories are called on
    every lookup. Queues without an entry get a handler from ``default_factory``.
    """

    def __init__(self, default_factory: ConsumerFactory) -> None:
        self.default_factory = default_factory
        self._consumers: Dict[str, ConsumerEntry] = {}

    def register(self, queue: str, consumer: ConsumerEntry) -> None:
        self._consumers[queue] = consumer

    def registered(self) -> Dict[str, ConsumerEntry]:
        return dict(self._consumers)

    def get(self, queue: str) -> IConsumer:
        entry = self._consumers.get(queue)
        if entry is None:
            return self.default_factory()
        if isinstance(entry, IConsumer):
            return entry
        return entry()
