"""Discover, score and rank developer tools from npm, PyPI, GitHub and Docker Hub."""

from stack_discovery.aggregator import AggregationResult, SourceAggregator
from stack_discovery.engine import DiscoveryEngine
from stack_discovery.mapping import map_to_discovery_tool_dto

__all__ = [
    "AggregationResult",
    "DiscoveryEngine",
    "SourceAggregator",
    "map_to_discovery_tool_dto",
]
