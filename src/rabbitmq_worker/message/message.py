"""Envelope around a single delivery received from RabbitMQ."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pika.adapters.blocking_connection import BlockingChannel
from pika.spec import Basic, BasicProperties

from rabbitmq_worker.exceptions import MessageAlreadySettled

X_DEATH_HEADER = "x-death"


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@dataclass(frozen=True)
class FailureHistoryEntry:
    """One ``x-death`` record maintained by the broker."""

    queue: str
    count: int
    reason: Optional[str] = None
    exchange: Optional[str] = None
    routing_keys: Tuple[str, ...] = ()

    @classmethod
    def from_header(cls, entry: Mapping[str, Any]) -> FailureHistoryEntry:
        return cls(
            queue=_as_text(entry["queue"]) or "",
            count=int(entry.get("count", 0)),
            reason=_as_text(entry.get("reason")),
            exchange=_as_text(entry.get("exchange")),
            routing_keys=tuple(_as_text(key) or "" for key in entry.get("routing-keys") or ()),
        )


class Message:
    """A delivered message that must be settled exactly once.

    Wraps the channel, delivery method, properties and body handed to a pika consumer
    callback. ``ack`` and ``reject`` are the only ways to settle it.
    """

    def __init__(
        self,
        *,
        channel: BlockingChannel,
        method: Basic.Deliver,
        properties: BasicProperties,
        body: bytes,
        queue: Optional[str] = None,
    ) -> None:
        self.channel = channel
        self.method = method
        self.properties = properties
        self.body = body
        self.queue = queue
        self._settled_by: Optional[str] = None

    @property
    def delivery_tag(self) -> int:
        return self.method.delivery_tag

    @property
    def consumer_tag(self) -> Optional[str]:
        return self.method.consumer_tag

    @property
    def routing_key(self) -> str:
        return self.method.routing_key

    @property
    def exchange(self) -> str:
        return self.method.exchange

    @property
    def redelivered(self) -> bool:
        return bool(self.method.redelivered)

    @property
    def content_type(self) -> Optional[str]:
        return self.properties.content_type

    @property
    def delivery_mode(self) -> Optional[int]:
        return self.properties.delivery_mode

    @property
    def message_id(self) -> Optional[str]:
        return self.properties.message_id

    @property
    def correlation_id(self) -> Optional[str]:
        return self.properties.correlation_id

    @property
    def headers(self) -> Dict[str, Any]:
        return dict(self.properties.headers or {})

    @property
    def settled(self) -> bool:
        return self._settled_by is not None

    def failure_history(self) -> List[FailureHistoryEntry]:
        """Parse the ``x-death`` header; raises if the header is malformed."""
        entries = self.headers.get(X_DEATH_HEADER) or []
        return [FailureHistoryEntry.from_header(entry) for entry in entries]

    def text(self) -> str:
        return self.body.decode("utf-8")

    def ack(self) -> None:
        self._settle("ack")
        self.channel.basic_ack(delivery_tag=self.delivery_tag)

    def reject(self, requeue: bool = False) -> None:
        self._settle("reject")
        self.channel.basic_reject(delivery_tag=self.delivery_tag, requeue=requeue)

    def _settle(self, action: str) -> None:
        if self._settled_by is not None:
            raise MessageAlreadySettled(
                f"Cannot {action} delivery {self.delivery_tag}: already settled by {self._settled_by}."
            )
        self._settled_by = action

    def __repr__(self) -> str:
        return (
            f"Message(delivery_tag={self.delivery_tag!r}, routing_key={self.routing_key!r}, "
            f"message_id={self.message_id!r})"
        )
