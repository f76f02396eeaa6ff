"""JSON implementation of the message decoder."""

from __future__ import annotations

import json
from typing import Any

from rabbitmq_worker.contracts import IMessageDecoder


class JSONMessageDecoder(IMessageDecoder):
    """Decodes UTF-8 JSON payloads."""

    def decode(self, payload: bytes) -> Any:
        try:
            return json.loads(payload.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise ValueError("Message payload is not valid UTF-8.") from exc
        except json.JSONDecodeError as exc:
            raise ValueError("Failed to decode message payload as JSON.") from exc
