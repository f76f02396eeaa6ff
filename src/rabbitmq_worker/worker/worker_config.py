"""Factories for wiring a `Worker`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from rabbitmq_worker.config import RabbitMQConfig
from rabbitmq_worker.contracts import IEventDispatcher
from rabbitmq_worker.events import EventDispatcher
from rabbitmq_worker.manager import RabbitMQManager

from .signals import StopToken


@dataclass(frozen=True)
class WorkerDependencies:
    """Bundles factory functions used by ``Worker.from_config``."""

    make_manager: Callable[[RabbitMQConfig], RabbitMQManager] = field(
        default=lambda config: RabbitMQManager(config)
    )
    make_events: Callable[[], IEventDispatcher] = field(default=EventDispatcher)
    make_stop_token: Callable[[], StopToken] = field(default=StopToken)
