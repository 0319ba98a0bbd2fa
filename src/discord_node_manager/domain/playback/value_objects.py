"""Immutable value objects for the playback bounded context."""

from __future__ import annotations

from enum import Enum
from typing import Final

DEFAULT_SEARCH_IDENTIFIER: Final[str] = "ytsearch"

# Identifiers the node reports for a flat single-source search.
SEARCH_IDENTIFIERS: Final[frozenset[str]] = frozenset({"ytsearch", "scsearch"})


class SearchResultType(Enum):
    """Discriminant of a resolved search."""

    NO_RESULT = "NO_RESULT"
    SEARCH_RESULT = "SEARCH_RESULT"
    PLAYLIST = "PLAYLIST"


class PlaybackState(Enum):
    """Playback state of a guild session as last reported by the node."""

    IDLE = "idle"
    PLAYING = "playing"

    @property
    def is_active(self) -> bool:
        return self == PlaybackState.PLAYING


class NodeState(Enum):
    """Connection state of the node socket.

    State transitions:
    - DISCONNECTED -> CONNECTING (connect)
    - CONNECTING -> CONNECTED | DISCONNECTED (attempts exhausted)
    - CONNECTED -> RECONNECTING (socket dropped)
    - RECONNECTING -> CONNECTED | DISCONNECTED (attempts exhausted)
    - Any -> DISCONNECTED (destroy)
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"

    def can_transition_to(self, target: NodeState) -> bool:
        """Check if transition to target state is valid."""
        if target == NodeState.DISCONNECTED:
            return True
        valid_transitions = {
            NodeState.DISCONNECTED: {NodeState.CONNECTING},
            NodeState.CONNECTING: {NodeState.CONNECTED},
            NodeState.CONNECTED: {NodeState.RECONNECTING},
            NodeState.RECONNECTING: {NodeState.CONNECTED},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_open(self) -> bool:
        return self == NodeState.CONNECTED


class NodeEventType(Enum):
    """Type discriminator (``t``) of frames received from the node."""

    READY = "READY"
    TRACK_ADD = "TRACK_ADD"
    TRACKS_ADD = "TRACKS_ADD"
    TRACK_START = "TRACK_START"
    TRACK_END = "TRACK_END"
    TRACK_ERROR = "TRACK_ERROR"
    QUEUE_END = "QUEUE_END"
    VOICE_CONNECTION_READY = "VOICE_CONNECTION_READY"
    VOICE_CONNECTION_DISCONNECT = "VOICE_CONNECTION_DISCONNECT"
    VOICE_CONNECTION_ERROR = "VOICE_CONNECTION_ERROR"
    AUDIO_PLAYER_ERROR = "AUDIO_PLAYER_ERROR"

    @property
    def is_session_scoped(self) -> bool:
        return self in {
            NodeEventType.TRACK_ADD,
            NodeEventType.TRACKS_ADD,
            NodeEventType.TRACK_START,
            NodeEventType.TRACK_END,
            NodeEventType.TRACK_ERROR,
            NodeEventType.QUEUE_END,
        }


class GatewayEventType(Enum):
    """Gateway dispatch types the node needs to establish voice."""

    VOICE_SERVER_UPDATE = "VOICE_SERVER_UPDATE"
    VOICE_STATE_UPDATE = "VOICE_STATE_UPDATE"

    @classmethod
    def from_tag(cls, tag: object) -> GatewayEventType | None:
        """Return the member for a raw ``t`` value, or None for any other tag."""
        try:
            return cls(tag)
        except ValueError:
            return None
