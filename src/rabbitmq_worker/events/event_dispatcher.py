"""In-process dispatcher for worker lifecycle events."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Optional

from rabbitmq_worker.contracts import IEventDispatcher

MESSAGE_PROCESSING = "rabbitmq.processing"
MESSAGE_PROCESSED = "rabbitmq.processed"
MESSAGE_FAILED = "rabbitmq.failed"

Listener = Callable[..., None]


class EventDispatcher(IEventDispatcher):
    """Calls registered listeners synchronously, in registration order."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self.logger = logger or logging.getLogger(__name__)

    def listen(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def forget(self, event: str) -> None:
        self._listeners.pop(event, None)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def dispatch(self, event: str, *payload: Any) -> None:
        listeners = list(self._listeners.get(event, ()))
        self.logger.debug("Dispatching %s to %d listener(s)", event, len(listeners))
        for listener in listeners:
            listener(*payload)
