"""RabbitMQ connection management."""

from __future__ import annotations

import logging
import ssl
from typing import Dict, Mapping, Optional

import pika
from pika.adapters.blocking_connection import BlockingChannel, BlockingConnection
from pika.connection import Parameters
from pika.exceptions import AMQPError

from rabbitmq_worker.config import ConnectionConfig
from rabbitmq_worker.contracts import IConnectionRegistry
from rabbitmq_worker.exceptions import ConfigurationError


class ConnectionRegistry(IConnectionRegistry):
    """Lazily opens and caches blocking connections and channels by connection name."""

    def __init__(
        self,
        config: Mapping[str, ConnectionConfig],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = dict(config)
        self.connections: Dict[str, BlockingConnection] = {}
        self.channels: Dict[str, BlockingChannel] = {}
        self.logger = logger or logging.getLogger(__name__)

    def get_connection(self, name: str = "default") -> BlockingConnection:
        connection = self.connections.get(name)
        if connection is None or connection.is_closed:
            connection = self._create_connection(name)
            self.connections[name] = connection
        return connection

    def get_channel(self, name: str = "default") -> BlockingChannel:
        channel = self.channels.get(name)
        if channel is None or channel.is_closed:
            if channel is not None:
                self.logger.debug("Re-opening channel for RabbitMQ connection [%s].", name)
            channel = self.get_connection(name).channel()
            self.channels[name] = channel
        return channel

    def close(self) -> None:
        try:
            for name, channel in self.channels.items():
                if channel.is_closed:
                    continue
                try:
                    channel.close()
                    self.logger.info("Closed RabbitMQ channel [%s].", name)
                except AMQPError as exc:
                    self.logger.warning("Failed to close RabbitMQ channel [%s]: %s", name, exc)

            for name, connection in self.connections.items():
                if connection.is_closed:
                    continue
                try:
                    connection.close()
                    self.logger.info("Closed RabbitMQ connection [%s].", name)
                except AMQPError as exc:
                    self.logger.warning("Failed to close RabbitMQ connection [%s]: %s", name, exc)
        finally:
            self.channels = {}
            self.connections = {}

    def _connection_config(self, name: str) -> ConnectionConfig:
        try:
            return self.config[name]
        except KeyError:
            raise ConfigurationError(f"Connection [{name}] not configured.") from None

    def _create_connection(self, name: str) -> BlockingConnection:
        parameters = self._build_parameters(self._connection_config(name))

        self.logger.info("Connecting to RabbitMQ [%s] at %s:%s", name, parameters.host, parameters.port)
        try:
            connection = pika.BlockingConnection(parameters)
        except pika.exceptions.AMQPConnectionError as exc:
            self.logger.error("Failed to establish RabbitMQ connection [%s]: %s", name, exc)
            raise

        self.logger.info("Connected to RabbitMQ [%s].", name)
        return connection

    def _build_parameters(self, config: ConnectionConfig) -> Parameters:
        if config.url:
            try:
                return pika.URLParameters(config.url)
            except ValueError as exc:
                raise ConfigurationError(f"Invalid RabbitMQ URL provided: {config.url}") from exc

        ssl_options = None
        if config.ssl.enabled:
            ssl_options = pika.SSLOptions(self._build_ssl_context(config), server_hostname=config.host)

        parameters = pika.ConnectionParameters(
            host=config.host,
            port=config.port,
            virtual_host=config.vhost,
            credentials=pika.PlainCredentials(config.user, config.password),
            ssl_options=ssl_options,
        )
        if config.heartbeat is not None:
            parameters.heartbeat = config.heartbeat
        if config.blocked_connection_timeout is not None:
            parameters.blocked_connection_timeout = config.blocked_connection_timeout
        return parameters

    @staticmethod
    def _build_ssl_context(config: ConnectionConfig) -> ssl.SSLContext:
        context = ssl.create_default_context(cafile=config.ssl.cafile)
        if config.ssl.certfile:
            context.load_cert_chain(certfile=config.ssl.certfile, keyfile=config.ssl.keyfile)
        if not config.ssl.verify_peer:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context
