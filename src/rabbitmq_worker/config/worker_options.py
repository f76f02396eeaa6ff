"""Runtime options for the worker loop."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from rabbitmq_worker.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)


_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "memory_limit": int,
    "timeout": float,
    "sleep": float,
    "max_jobs": int,
    "tries": int,
    "verbose": _to_bool,
    "once": _to_bool,
}


def _convert(key: str, value: Any) -> Any:
    try:
        return _CONVERTERS[key](value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid worker option {key}={value!r}: {exc}") from exc


@dataclass(frozen=True)
class WorkerOptions:
    """Lifecycle limits for a worker run.

    ``memory_limit`` is in megabytes, ``timeout`` and ``sleep`` in seconds. ``max_jobs`` of 0
    means unlimited.
    """

    memory_limit: int = 128
    timeout: float = 60
    sleep: float = 3
    max_jobs: int = 0
    tries: int = 1
    verbose: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> WorkerOptions:
        return cls().merged(data)

    def merged(self, overrides: Optional[Mapping[str, Any]]) -> WorkerOptions:
        """Return a copy with ``overrides`` applied; ``None`` values are ignored.

        ``once=True`` is accepted as shorthand for ``max_jobs=1``. Values are converted to the
        field types, so string values from a command line are accepted.
        """
        if not overrides:
            return self

        known = {f.name for f in dataclasses.fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "once":
                continue
            if key not in known:
                raise ConfigurationError(f"Unknown worker option {key!r}.")
            changes[key] = _convert(key, value)

        once = overrides.get("once")
        if once is not None and _convert("once", once):
            changes["max_jobs"] = 1

        return dataclasses.replace(self, **changes)
