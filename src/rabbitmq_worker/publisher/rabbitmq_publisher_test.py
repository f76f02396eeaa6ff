"""Tests for RabbitMQPublisher."""

import json
from unittest.mock import Mock

import pytest

from rabbitmq_worker.config import RabbitMQConfig
from rabbitmq_worker.contracts import IConnectionRegistry
from rabbitmq_worker.exceptions import ResourceNotConfigured
from rabbitmq_worker.publisher import RabbitMQPublisher, encode_payload
from rabbitmq_worker.topology import TopologyManager


@pytest.fixture
def channel():
    return Mock()


@pytest.fixture
def connections(channel):
    registry = Mock(spec=IConnectionRegistry)
    registry.get_channel.return_value = channel
    return registry


@pytest.fixture
def publisher(connections):
    config = RabbitMQConfig.from_mapping(
        {
            "exchanges": {
                "default": {"name": "app.default"},
                "remote": {"name": "app.remote", "connection": "remote"},
            },
            "queues": {
                "default": {"name": "default_queue", "routing_key": "default_queue"},
                "remote": {"name": "remote_queue", "exchange": "remote", "routing_key": "r"},
            },
        }
    )
    return RabbitMQPublisher(connections, TopologyManager(config))


def test_publish_json_defaults(publisher, connections, channel):
    publisher.publish("default", {"a": 1})

    connections.get_channel.assert_called_once_with("default")
    channel.queue_declare.assert_called_once()
    kwargs = channel.basic_publish.call_args.kwargs
    assert kwargs["exchange"] == "app.default"
    assert kwargs["routing_key"] == "default_queue"
    assert kwargs["body"] == b'{"a": 1}'
    assert kwargs["properties"].content_type == "application/json"
    assert kwargs["properties"].delivery_mode == 2
    assert kwargs["properties"].headers is None
    assert kwargs["properties"].message_id is None


def test_publish_with_options(publisher, channel):
    publisher.publish(
        "default",
        {"job": "resize"},
        routing_key="custom.key",
        headers={"tenant": "acme"},
        message_id="mid-1",
        correlation_id="cid-1",
    )

    kwargs = channel.basic_publish.call_args.kwargs
    assert kwargs["routing_key"] == "custom.key"
    assert kwargs["properties"].headers == {"tenant": "acme"}
    assert kwargs["properties"].message_id == "mid-1"
    assert kwargs["properties"].correlation_id == "cid-1"
    assert json.loads(kwargs["body"].decode("utf-8")) == {"job": "resize"}


def test_publish_text_payload_is_not_reencoded(publisher, channel):
    publisher.publish("default", '{"already": "json"}')

    assert channel.basic_publish.call_args.kwargs["body"] == b'{"already": "json"}'


def test_publish_uses_exchange_connection(publisher, connections):
    publisher.publish("remote", [1, 2])

    connections.get_channel.assert_called_once_with("remote")


def test_publish_unknown_queue(publisher, connections, channel):
    with pytest.raises(ResourceNotConfigured):
        publisher.publish("missing", {})

    connections.get_channel.assert_not_called()
    channel.basic_publish.assert_not_called()


def test_encode_payload_variants():
    assert encode_payload(b"raw") == b"raw"
    assert encode_payload("texto ç") == "texto ç".encode("utf-8")
    assert encode_payload({"a": [1, None]}) == b'{"a": [1, null]}'
