"""Cooperative stop requests driven by process signals."""

from __future__ import annotations

import logging
import signal
import threading
from types import FrameType, TracebackType
from typing import Any, Dict, Optional, Sequence, Type

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class StopToken:
    """Flag polled by the worker between messages."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def set(self, reason: str = "requested") -> None:
        self.reason = reason
        self._event.set()

    def clear(self) -> None:
        self.reason = None
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()


class SignalListener:
    """Sets a ``StopToken`` on SIGINT/SIGTERM while active.

    Handlers only flip the token; they never interrupt in-flight work. Previous handlers are
    restored on exit. Outside the main thread nothing is installed.
    """

    def __init__(
        self,
        token: StopToken,
        *,
        signals: Sequence[int] = DEFAULT_SIGNALS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token = token
        self.signals = tuple(signals)
        self.logger = logger or logging.getLogger(__name__)
        self._previous: Dict[int, Any] = {}

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            self.logger.warning("Not in the main thread; signal handlers were not installed.")
            return
        for signum in self.signals:
            self._previous[signum] = signal.signal(signum, self.handle)

    def restore(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def handle(self, signum: int, frame: Optional[FrameType] = None) -> None:
        name = signal.Signals(signum).name
        self.logger.info("Received %s; stopping after the current message.", name)
        self.token.set(name)

    def __enter__(self) -> SignalListener:
        self.install()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.restore()
