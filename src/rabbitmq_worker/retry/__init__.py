"""Retry decisions for failed messages."""

from .retry_policy import RetryDecision, RetryPolicy

__all__ = ["RetryDecision", "RetryPolicy"]
