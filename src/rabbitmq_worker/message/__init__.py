"""Delivered message envelope and broker failure history."""

from .message import X_DEATH_HEADER, FailureHistoryEntry, Message

__all__ = ["FailureHistoryEntry", "Message", "X_DEATH_HEADER"]
