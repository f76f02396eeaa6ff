"""Declarative topology setup for configured queues."""

from .topology_manager import ChannelSetup, TopologyManager, default_consumer_tag

__all__ = ["ChannelSetup", "TopologyManager", "default_consumer_tag"]
