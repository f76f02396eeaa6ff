"""Worker lifecycle notifications."""

from .event_dispatcher import (
    MESSAGE_FAILED,
    MESSAGE_PROCESSED,
    MESSAGE_PROCESSING,
    EventDispatcher,
)

__all__ = ["EventDispatcher", "MESSAGE_FAILED", "MESSAGE_PROCESSED", "MESSAGE_PROCESSING"]
