"""Session orchestration for guild audio playback against a single audio node."""

from discord_node_manager.application.manager import Manager
from discord_node_manager.application.session import GuildSession
from discord_node_manager.config.settings import ManagerOptions, NodeOptions
from discord_node_manager.domain.playback.entities import (
    PlaylistInfo,
    SearchQuery,
    SearchResult,
    SessionOptions,
    Track,
)
from discord_node_manager.domain.playback.value_objects import NodeState, SearchResultType
from discord_node_manager.domain.shared.events import (
    AudioPlayerErrored,
    NodeConnected,
    NodeDisconnected,
    NodeError,
    NodeReady,
    QueueEnded,
    TrackAdded,
    TrackEnded,
    TrackErrored,
    TracksAdded,
    TrackStarted,
    VoiceDisconnected,
    VoiceErrored,
    VoiceReady,
)
from discord_node_manager.domain.shared.exceptions import (
    ConfigurationError,
    DomainError,
    NodeConnectionError,
    ProtocolError,
    RequestError,
)

__version__ = "0.1.0"

__all__ = [
    # Manager
    "Manager",
    "ManagerOptions",
    "NodeOptions",
    "GuildSession",
    # Entities
    "PlaylistInfo",
    "SearchQuery",
    "SearchResult",
    "SessionOptions",
    "Track",
    # Value Objects
    "NodeState",
    "SearchResultType",
    # Events
    "NodeConnected",
    "NodeDisconnected",
    "NodeError",
    "NodeReady",
    "TrackAdded",
    "TracksAdded",
    "TrackStarted",
    "TrackEnded",
    "TrackErrored",
    "QueueEnded",
    "VoiceReady",
    "VoiceDisconnected",
    "VoiceErrored",
    "AudioPlayerErrored",
    # Errors
    "DomainError",
    "ConfigurationError",
    "NodeConnectionError",
    "RequestError",
    "ProtocolError",
]
