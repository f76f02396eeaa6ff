"""Blocking consume loop with lifecycle limits and graceful shutdown."""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Mapping, Optional, Union

from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import AMQPError
from pika.spec import Basic, BasicProperties

from rabbitmq_worker.config import RabbitMQConfig, WorkerOptions
from rabbitmq_worker.contracts import IEventDispatcher
from rabbitmq_worker.events import (
    MESSAGE_FAILED,
    MESSAGE_PROCESSED,
    MESSAGE_PROCESSING,
    EventDispatcher,
)
from rabbitmq_worker.exceptions import RabbitMQError
from rabbitmq_worker.manager import RabbitMQManager
from rabbitmq_worker.message import Message

from .memory import memory_usage_mb
from .signals import SignalListener, StopToken
from .worker_config import WorkerDependencies

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_MEMORY_LIMIT = 12

MEMORY_CHECK_INTERVAL = 10
TRANSPORT_ERROR_BACKOFF = 1


@dataclass
class WorkerState:
    jobs_processed: int = 0
    last_memory_check: Optional[float] = None
    current_message: Optional[Message] = None
    running: bool = False


class Worker:
    """Consumes one queue until a job limit, the memory limit or a stop signal is hit.

    Deliveries are buffered by the ``basic_consume`` callback and handled one per loop
    iteration, so stop conditions are evaluated between every two messages. Stop signals
    are only observed at the top of an iteration; a message being processed always
    finishes first.
    """

    def __init__(
        self,
        manager: RabbitMQManager,
        *,
        events: Optional[IEventDispatcher] = None,
        stop_token: Optional[StopToken] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.manager = manager
        self.events = events or EventDispatcher()
        self.stop_token = stop_token or StopToken()
        self.logger = logger or logging.getLogger(__name__)
        self.options = manager.config.worker
        self.state = WorkerState()
        self._channel: Optional[BlockingChannel] = None
        self._consumer_tag: Optional[str] = None
        self._pending: Deque[Message] = deque()

    @classmethod
    def from_config(
        cls,
        config: RabbitMQConfig,
        *,
        dependencies: Optional[WorkerDependencies] = None,
    ) -> Worker:
        deps = dependencies or WorkerDependencies()

        return cls(
            deps.make_manager(config),
            events=deps.make_events(),
            stop_token=deps.make_stop_token(),
        )

    def run(
        self,
        queue: str,
        options: Union[WorkerOptions, Mapping[str, Any], None] = None,
    ) -> int:
        """Like ``work`` but maps startup failures to exit status 1."""
        try:
            return self.work(queue, options)
        except (RabbitMQError, AMQPError) as exc:
            self.logger.error("Failed to start the RabbitMQ worker for [%s]: %s", queue, exc)
            self.manager.close()
            return EXIT_ERROR

    def work(
        self,
        queue: str,
        options: Union[WorkerOptions, Mapping[str, Any], None] = None,
    ) -> int:
        if isinstance(options, WorkerOptions):
            self.options = options
        else:
            self.options = self.manager.config.worker.merged(options)
        self.state = WorkerState(running=True)
        self.stop_token.clear()

        self._start_consuming(queue)
        self.logger.info("Processing jobs from the [%s] queue.", queue)

        with SignalListener(self.stop_token, logger=self.logger):
            try:
                return self._loop(queue)
            finally:
                if self.state.running:
                    self.stop(EXIT_ERROR)

    def stop(self, status: int = EXIT_SUCCESS) -> int:
        self.state.running = False
        self._cancel_consumer()
        self.manager.close()
        self._channel = None
        self._pending.clear()
        self.logger.info(
            "Worker stopped with status %s after %s job(s).", status, self.state.jobs_processed
        )
        return status

    def _loop(self, queue: str) -> int:
        while True:
            if self.stop_token.is_set():
                self.logger.info("Stop requested (%s).", self.stop_token.reason)
                return self.stop(EXIT_SUCCESS)

            try:
                message = self._next_message(queue)
            except Exception as exc:
                self._report_exception(exc)
                self._sleep(TRANSPORT_ERROR_BACKOFF)
                continue

            if message is not None:
                self._process(message, queue)

            status = self._stop_status()
            if status is not None:
                return self.stop(status)

            if message is None:
                self._sleep(self.options.sleep)

    def _start_consuming(self, queue: str) -> BlockingChannel:
        channel = self.manager.channel_for(queue)
        setup = self.manager.setup_channel(queue, channel)
        self._pending.clear()

        def on_message(
            ch: BlockingChannel,
            method: Basic.Deliver,
            properties: BasicProperties,
            body: bytes,
        ) -> None:
            self._pending.append(
                Message(channel=ch, method=method, properties=properties, body=body, queue=queue)
            )

        self._consumer_tag = channel.basic_consume(
            queue=setup.queue.name,
            on_message_callback=on_message,
            consumer_tag=setup.consumer_tag,
        )
        self._channel = channel
        self.logger.info("Started consuming from %s as %s", setup.queue.name, self._consumer_tag)
        return channel

    def _next_message(self, queue: str) -> Optional[Message]:
        if not self._pending:
            channel = self._channel
            if channel is None or channel.is_closed:
                self.logger.warning("Channel for [%s] is closed; re-establishing consumer.", queue)
                channel = self._start_consuming(queue)
            channel.connection.process_data_events(time_limit=self.options.timeout)

        if self._pending:
            return self._pending.popleft()
        return None

    def _process(self, message: Message, queue: str) -> None:
        self.state.current_message = message
        try:
            self._dispatch(MESSAGE_PROCESSING, message, queue)

            if self.options.verbose:
                self.logger.info(
                    "Processing message from queue [%s]: body=%r properties=%r",
                    queue,
                    message.body,
                    message.properties,
                )

            try:
                self.manager.get_consumer(queue).process(message)
            except Exception as exc:
                if not message.settled:
                    self.manager.retry_policy.handle(message, exc)
                self._report_exception(exc)
                self._dispatch(MESSAGE_FAILED, message, queue, exc)
                return

            self._dispatch(MESSAGE_PROCESSED, message, queue)
            self.state.jobs_processed += 1
        finally:
            self.state.current_message = None

    def _dispatch(self, event: str, *payload: Any) -> None:
        try:
            self.events.dispatch(event, *payload)
        except Exception as exc:
            self._report_exception(exc)

    def _stop_status(self) -> Optional[int]:
        if self.options.max_jobs > 0 and self.state.jobs_processed >= self.options.max_jobs:
            self.logger.info("Reached max jobs (%s).", self.options.max_jobs)
            return EXIT_SUCCESS

        if self._memory_exceeded():
            self.logger.warning("Memory limit of %sMB exceeded.", self.options.memory_limit)
            return EXIT_MEMORY_LIMIT

        return None

    def _memory_exceeded(self) -> bool:
        """Compare peak resident memory against the limit, sampling at most every 10 seconds.

        Peak RSS never decreases, so once the limit is crossed the worker stops on the next
        sample even if memory has since been released.
        """
        now = time.monotonic()
        last = self.state.last_memory_check
        if last is not None and now - last < MEMORY_CHECK_INTERVAL:
            return False

        self.state.last_memory_check = now
        return memory_usage_mb() >= self.options.memory_limit

    def _sleep(self, seconds: float) -> None:
        if seconds <= 0:
            return
        channel = self._channel
        if channel is not None and channel.is_open and channel.connection.is_open:
            # Keeps heartbeats flowing while idle.
            channel.connection.sleep(seconds)
        else:
            time.sleep(seconds)

    def _cancel_consumer(self) -> None:
        channel, tag = self._channel, self._consumer_tag
        self._consumer_tag = None
        if channel is None or tag is None or not channel.is_open:
            return
        try:
            channel.basic_cancel(tag)
        except AMQPError as exc:
            self.logger.warning("Failed to cancel consumer %s: %s", tag, exc)

    def _report_exception(self, exc: BaseException) -> None:
        self.logger.error("RabbitMQ worker error: %s", exc, exc_info=exc)
