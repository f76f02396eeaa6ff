"""In-memory broker doubles shared by the cross-component tests."""

from collections import deque
from itertools import count

import pika
import pytest
from pika.exceptions import ChannelClosedByBroker, ChannelWrongStateError
from pika.spec import Basic

from rabbitmq_worker.config import RabbitMQConfig
from rabbitmq_worker.connection import ConnectionRegistry
from rabbitmq_worker.manager import RabbitMQManager


class FakeBroker:
    def __init__(self):
        self.exchanges = {}
        self.queues = {}
        self.bindings = []
        self.connections = []
        self.on_wait = None

    def route(self, exchange, routing_key):
        exchange_type = self.exchanges[exchange]["exchange_type"]
        for queue, bound_exchange, key in self.bindings:
            if bound_exchange != exchange:
                continue
            if exchange_type == "fanout" or key == routing_key:
                yield queue


class FakeQueue:
    def __init__(self, declaration):
        self.declaration = declaration
        self.ready = deque()


class FakeConnection:
    def __init__(self, broker):
        self.broker = broker
        self.is_open = True
        self.channels = []
        self.process_calls = []
        self.slept = []
        broker.connections.append(self)

    @property
    def is_closed(self):
        return not self.is_open

    def channel(self):
        channel = FakeChannel(self)
        self.channels.append(channel)
        return channel

    def process_data_events(self, time_limit=0):
        self.process_calls.append(time_limit)
        if self.broker.on_wait is not None:
            self.broker.on_wait()
        for channel in self.channels:
            channel.deliver()

    def sleep(self, seconds):
        self.slept.append(seconds)

    def close(self):
        for channel in self.channels:
            channel.is_open = False
        self.is_open = False


class FakeChannel:
    def __init__(self, connection):
        self.connection = connection
        self.broker = connection.broker
        self.is_open = True
        self.consumers = {}
        self.unacked = {}
        self.prefetch_count = 0
        self.published = []
        self.acked = []
        self.rejected = []
        self.cancelled = []
        self._tags = count(1)
        self._delivery_tags = count(1)

    @property
    def is_closed(self):
        return not self.is_open

    def _check_open(self):
        if not self.is_open:
            raise ChannelWrongStateError("Channel is closed.")

    def _fail(self, reply_code, reply_text):
        self.close()
        raise ChannelClosedByBroker(reply_code, reply_text)

    def exchange_declare(self, exchange, exchange_type, passive, durable, auto_delete, internal, arguments):
        self._check_open()
        declaration = dict(exchange_type=exchange_type, durable=durable, auto_delete=auto_delete,
                           internal=internal, arguments=arguments)
        existing = self.broker.exchanges.get(exchange)
        if passive:
            if existing is None:
                self._fail(404, f"NOT_FOUND - no exchange '{exchange}'")
            return
        if existing is not None and existing != declaration:
            self._fail(406, f"PRECONDITION_FAILED - inequivalent arg for exchange '{exchange}'")
        self.broker.exchanges[exchange] = declaration

    def queue_declare(self, queue, passive, durable, exclusive, auto_delete, arguments):
        self._check_open()
        declaration = dict(durable=durable, exclusive=exclusive, auto_delete=auto_delete, arguments=arguments)
        existing = self.broker.queues.get(queue)
        if passive:
            if existing is None:
                self._fail(404, f"NOT_FOUND - no queue '{queue}'")
            return
        if existing is not None and existing.declaration != declaration:
            self._fail(406, f"PRECONDITION_FAILED - inequivalent arg for queue '{queue}'")
        if existing is None:
            self.broker.queues[queue] = FakeQueue(declaration)

    def queue_bind(self, queue, exchange, routing_key):
        self._check_open()
        binding = (queue, exchange, routing_key)
        if binding not in self.broker.bindings:
            self.broker.bindings.append(binding)

    def basic_qos(self, prefetch_size=0, prefetch_count=0, global_qos=False):
        self._check_open()
        self.prefetch_count = prefetch_count

    def basic_publish(self, exchange, routing_key, body, properties=None):
        self._check_open()
        self.published.append((exchange, routing_key, body, properties))
        for queue in self.broker.route(exchange, routing_key):
            self.broker.queues[queue].ready.append((exchange, routing_key, body, properties, False))

    def basic_consume(self, queue, on_message_callback, consumer_tag=None):
        self._check_open()
        tag = consumer_tag or f"ctag{next(self._tags)}"
        self.consumers[tag] = (queue, on_message_callback)
        return tag

    def basic_cancel(self, consumer_tag):
        self._check_open()
        self.consumers.pop(consumer_tag, None)
        self.cancelled.append(consumer_tag)

    def deliver(self):
        if not self.is_open:
            return
        for tag, (queue_name, callback) in list(self.consumers.items()):
            queue = self.broker.queues[queue_name]
            while queue.ready and (self.prefetch_count == 0 or len(self.unacked) < self.prefetch_count):
                exchange, routing_key, body, properties, redelivered = queue.ready.popleft()
                delivery_tag = next(self._delivery_tags)
                self.unacked[delivery_tag] = (queue_name, exchange, routing_key, body, properties)
                method = Basic.Deliver(
                    consumer_tag=tag,
                    delivery_tag=delivery_tag,
                    redelivered=redelivered,
                    exchange=exchange,
                    routing_key=routing_key,
                )
                callback(self, method, properties or pika.BasicProperties(), body)

    def basic_ack(self, delivery_tag):
        self._check_open()
        self.unacked.pop(delivery_tag)
        self.acked.append(delivery_tag)

    def basic_reject(self, delivery_tag, requeue=True):
        self._check_open()
        queue_name, exchange, routing_key, body, properties = self.unacked.pop(delivery_tag)
        self.rejected.append((delivery_tag, requeue))
        if requeue:
            self.broker.queues[queue_name].ready.appendleft((exchange, routing_key, body, properties, True))

    def close(self):
        for queue_name, exchange, routing_key, body, properties in self.unacked.values():
            self.broker.queues[queue_name].ready.appendleft((exchange, routing_key, body, properties, True))
        self.unacked.clear()
        self.consumers.clear()
        self.is_open = False


class FakeConnectionRegistry(ConnectionRegistry):
    def __init__(self, config, broker):
        super().__init__(config)
        self.broker = broker

    def _create_connection(self, name):
        self._connection_config(name)
        return FakeConnection(self.broker)


@pytest.fixture
def broker():
    return FakeBroker()


@pytest.fixture
def config():
    return RabbitMQConfig.from_mapping(
        {
            "connections": {"default": {"host": "localhost"}},
            "exchanges": {"default": {"name": "app.default", "type": "direct"}},
            "queues": {
                "default": {
                    "name": "default_queue",
                    "routing_key": "default_queue",
                    "consumer_tag": "consumer.test",
                    "prefetch": {"count": 1, "size": 0},
                    "retry": {"enabled": True, "max_attempts": 3},
                }
            },
            "worker": {"memory_limit": 100000, "timeout": 1, "sleep": 0, "max_jobs": 0},
        }
    )


@pytest.fixture
def manager(config, broker):
    return RabbitMQManager(config, connections=FakeConnectionRegistry(config.connections, broker))
