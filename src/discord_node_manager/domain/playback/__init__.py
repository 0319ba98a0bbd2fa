"""
Playback Bounded Context

Tracks, search results and guild session bookkeeping.
"""

from discord_node_manager.domain.playback.entities import (
    PlaylistInfo,
    SearchQuery,
    SearchResult,
    SessionOptions,
    Track,
)
from discord_node_manager.domain.playback.registry import SessionRegistry
from discord_node_manager.domain.playback.value_objects import (
    GatewayEventType,
    NodeEventType,
    NodeState,
    PlaybackState,
    SearchResultType,
)

__all__ = [
    # Entities
    "Track",
    "PlaylistInfo",
    "SearchQuery",
    "SearchResult",
    "SessionOptions",
    # Value Objects
    "SearchResultType",
    "PlaybackState",
    "NodeState",
    "NodeEventType",
    "GatewayEventType",
    # Registry
    "SessionRegistry",
]
