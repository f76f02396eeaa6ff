"""Exchange declaration options."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from rabbitmq_worker.exceptions import ConfigurationError

EXCHANGE_TYPES = ("direct", "topic", "fanout", "headers")


@dataclass(frozen=True)
class ExchangeConfig:
    """Encapsulates exchange declaration options.

    ``connection`` names the entry in the connections mapping the exchange lives on.
    """

    name: str
    type: str = "direct"
    connection: str = "default"
    passive: bool = False
    durable: bool = True
    auto_delete: bool = False
    internal: bool = False
    arguments: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.type not in EXCHANGE_TYPES:
            raise ConfigurationError(
                f"Exchange [{self.name}] has unsupported type {self.type!r}; "
                f"expected one of {', '.join(EXCHANGE_TYPES)}."
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ExchangeConfig:
        if not data.get("name"):
            raise ConfigurationError("Exchange configuration requires a name.")
        return cls(
            name=data["name"],
            type=data.get("type", "direct"),
            connection=data.get("connection", "default"),
            passive=bool(data.get("passive", False)),
            durable=bool(data.get("durable", True)),
            auto_delete=bool(data.get("auto_delete", False)),
            internal=bool(data.get("internal", False)),
            arguments=dict(data.get("arguments") or {}),
        )
