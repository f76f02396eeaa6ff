"""Worker loop, stop signals and exit codes."""

from .memory import memory_usage_mb
from .signals import SignalListener, StopToken
from .worker import (
    EXIT_ERROR,
    EXIT_MEMORY_LIMIT,
    EXIT_SUCCESS,
    MEMORY_CHECK_INTERVAL,
    Worker,
    WorkerState,
)
from .worker_config import WorkerDependencies

__all__ = [
    "EXIT_ERROR",
    "EXIT_MEMORY_LIMIT",
    "EXIT_SUCCESS",
    "MEMORY_CHECK_INTERVAL",
    "SignalListener",
    "StopToken",
    "Worker",
    "WorkerDependencies",
    "WorkerState",
    "memory_usage_mb",
]
