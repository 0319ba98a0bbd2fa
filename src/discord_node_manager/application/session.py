"""Per-guild playback session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from discord_node_manager.domain.playback.entities import SessionOptions
from discord_node_manager.domain.playback.value_objects import NodeEventType, PlaybackState
from discord_node_manager.domain.shared.exceptions import InvalidOperationError
from discord_node_manager.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from discord_node_manager.application.manager import Manager

logger = logging.getLogger(__name__)

VOICE_STATE_OP = 4


class GuildSession:
    """Playback session for one guild.

    Holds a reference back to its manager to reach the node and the gateway
    ``send`` callback; the manager owns the session, not the other way round.
    Queue and playback state mirror what the node reports.
    """

    def __init__(self, manager: Manager, options: SessionOptions) -> None:
        self._manager = manager
        self.options = options
        self.guild_id = options.guild_id
        self.voice_channel_id = options.voice_channel_id
        self.text_channel_id = options.text_channel_id
        self.self_deaf = options.self_deaf
        self.self_mute = options.self_mute

        self.state = PlaybackState.IDLE
        self.queue: list[dict[str, Any]] = []
        self.current_track: dict[str, Any] | None = None
        self.connected = False
        self._destroyed = False

    def __repr__(self) -> str:
        return f"<GuildSession guild_id={self.guild_id} state={self.state.name}>"

    @property
    def manager(self) -> Manager:
        return self._manager

    @property
    def is_playing(self) -> bool:
        return self.state.is_active

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    async def _send_voice_state(self, channel_id: str | None) -> None:
        payload = {
            "op": VOICE_STATE_OP,
            "d": {
                "guild_id": self.guild_id,
                "channel_id": channel_id,
                "self_mute": self.self_mute,
                "self_deaf": self.self_deaf,
            },
        }
        await self._manager.options.send(self.guild_id, payload)

    async def connect(self, voice_channel_id: str | None = None) -> None:
        """Ask the gateway to join the voice channel.

        The node takes over once the resulting voice gateway events are
        forwarded to it.
        """
        channel_id = str(voice_channel_id) if voice_channel_id else self.voice_channel_id
        if channel_id is None:
            raise InvalidOperationError(
                operation="connect",
                current_state="no voice channel",
                message=f"Session for guild {self.guild_id} has no voice channel to join",
            )
        if self._destroyed:
            raise InvalidOperationError(operation="connect", current_state="destroyed")

        logger.info(LogTemplates.SESSION_CONNECTING, channel_id, self.guild_id)
        await self._send_voice_state(channel_id)
        self.voice_channel_id = channel_id
        self.connected = True

    async def disconnect(self) -> None:
        logger.info(LogTemplates.SESSION_DISCONNECTING, self.guild_id)
        await self._send_voice_state(None)
        self.connected = False
        self.state = PlaybackState.IDLE
        self.current_track = None

    async def destroy(self) -> None:
        """Leave voice and drop this session from the manager."""
        if self._destroyed:
            return
        self._destroyed = True
        if self.connected:
            await self.disconnect()
        self._manager.remove(self.guild_id, self)

    def handle_event(self, event_type: NodeEventType, payload: dict[str, Any]) -> None:
        """Apply a session-scoped node event to the mirrored state."""
        if event_type == NodeEventType.TRACK_ADD:
            track = payload.get("track")
            if track is not None:
                self.queue.append(track)
        elif event_type == NodeEventType.TRACKS_ADD:
            self.queue.extend(payload.get("tracks") or [])
        elif event_type == NodeEventType.TRACK_START:
            track = payload.get("track")
            if self.queue and self.queue[0] == track:
                self.queue.pop(0)
            self.current_track = track
            self.state = PlaybackState.PLAYING
        elif event_type in (NodeEventType.TRACK_END, NodeEventType.TRACK_ERROR):
            self.current_track = None
        elif event_type == NodeEventType.QUEUE_END:
            self.queue.clear()
            self.current_track = None
            self.state = PlaybackState.IDLE
