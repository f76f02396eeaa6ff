"""Tests for RetryPolicy."""

import logging
from unittest.mock import Mock

import pika
import pytest
from pika.spec import Basic

from rabbitmq_worker.config import RabbitMQConfig
from rabbitmq_worker.message import Message
from rabbitmq_worker.retry import RetryPolicy


@pytest.fixture
def config():
    return RabbitMQConfig.from_mapping(
        {
            "queues": {
                "default": {
                    "name": "default_queue",
                    "routing_key": "default_queue",
                    "retry": {"enabled": True, "max_attempts": 3, "delay": 1000},
                },
                "no_retry": {
                    "name": "no_retry_queue",
                    "routing_key": "no_retry_queue",
                    "retry": {"enabled": False, "max_attempts": 10},
                },
            }
        }
    )


@pytest.fixture
def policy(config):
    return RetryPolicy(config)


def make_message(routing_key="default_queue", headers=None):
    return Message(
        channel=Mock(),
        method=Basic.Deliver(
            consumer_tag="ctag", delivery_tag=7, redelivered=True, exchange="app", routing_key=routing_key
        ),
        properties=pika.BasicProperties(headers=headers),
        body=b'{"a": 1}',
    )


def x_death(queue, count):
    return {"x-death": [{"queue": queue, "count": count, "reason": "rejected", "exchange": "app"}]}


def test_requeues_below_max_attempts(policy):
    message = make_message(headers=x_death("default_queue", 1))

    policy.handle(message, RuntimeError("boom"))

    message.channel.basic_reject.assert_called_once_with(delivery_tag=7, requeue=True)


def test_drops_at_max_attempts(policy, caplog):
    message = make_message(headers=x_death("default_queue", 3))

    with caplog.at_level(logging.ERROR):
        policy.handle(message, RuntimeError("boom"))

    message.channel.basic_reject.assert_called_once_with(delivery_tag=7, requeue=False)
    assert "max retries reached" in caplog.text


def test_drops_when_retry_disabled(policy):
    message = make_message(routing_key="no_retry_queue", headers=x_death("no_retry_queue", 0))

    policy.handle(message, RuntimeError("boom"))

    message.channel.basic_reject.assert_called_once_with(delivery_tag=7, requeue=False)


def test_missing_header_counts_as_first_attempt(policy):
    message = make_message(headers=None)

    decision = policy.decide(message)

    assert decision.retry_count == 0
    assert decision.requeue is True
    assert decision.max_attempts == 3


def test_only_entries_for_current_queue_count(policy):
    headers = {
        "x-death": [
            {"queue": "other_queue", "count": 9},
            {"queue": "default_queue", "count": 2},
        ]
    }

    assert policy.retry_count(make_message(headers=headers)) == 2
    assert policy.retry_count(make_message(headers={"x-death": [{"queue": "x", "count": 5}]})) == 0


def test_resolves_queue_by_config_name(policy):
    message = make_message(routing_key="no_retry", headers=None)

    assert policy.decide(message).requeue is False


def test_unknown_queue_uses_default_retry(policy):
    message = make_message(routing_key="unknown", headers=x_death("unknown", 2))

    decision = policy.decide(message)

    assert decision.requeue is True
    assert decision.max_attempts == 3


def test_bookkeeping_failure_drops_and_logs_both_errors(policy, caplog):
    message = make_message(headers={"x-death": [{"count": 1}]})

    with caplog.at_level(logging.ERROR):
        policy.handle(message, RuntimeError("original"))

    message.channel.basic_reject.assert_called_once_with(delivery_tag=7, requeue=False)
    assert "original" in caplog.text
    assert "handling_exception" in caplog.text


def test_reject_failure_never_raises(policy, caplog):
    message = make_message(headers=None)
    message.channel.basic_reject.side_effect = pika.exceptions.ChannelWrongStateError("closed")

    with caplog.at_level(logging.ERROR):
        policy.handle(message, RuntimeError("boom"))

    assert "Failed to reject" in caplog.text


def test_bookkeeping_failure_skips_settled_message(policy):
    message = make_message(headers={"x-death": "garbage"})
    message.ack()

    policy.handle(message, RuntimeError("boom"))

    message.channel.basic_reject.assert_not_called()
