"""Routes gateway events to the node and node frames to sessions and subscribers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

from discord_node_manager.domain.playback.registry import SessionRegistry
from discord_node_manager.domain.playback.value_objects import GatewayEventType, NodeEventType
from discord_node_manager.domain.shared.events import (
    AudioPlayerErrored,
    DomainEvent,
    EventBus,
    NodeReady,
    QueueEnded,
    SessionEvent,
    TrackAdded,
    TrackEnded,
    TrackErrored,
    TracksAdded,
    TrackStarted,
    VoiceDisconnected,
    VoiceErrored,
    VoiceEvent,
    VoiceReady,
)
from discord_node_manager.domain.shared.exceptions import NodeConnectionError
from discord_node_manager.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from discord_node_manager.application.session import GuildSession
    from discord_node_manager.infrastructure.node.connection import NodeConnection
    from discord_node_manager.infrastructure.node.frames import NodeFrame

logger = logging.getLogger(__name__)

SESSION_EVENTS: dict[NodeEventType, type[SessionEvent]] = {
    NodeEventType.TRACK_ADD: TrackAdded,
    NodeEventType.TRACKS_ADD: TracksAdded,
    NodeEventType.TRACK_START: TrackStarted,
    NodeEventType.TRACK_END: TrackEnded,
    NodeEventType.TRACK_ERROR: TrackErrored,
    NodeEventType.QUEUE_END: QueueEnded,
}

VOICE_EVENTS: dict[NodeEventType, type[VoiceEvent]] = {
    NodeEventType.VOICE_CONNECTION_READY: VoiceReady,
    NodeEventType.VOICE_CONNECTION_DISCONNECT: VoiceDisconnected,
    NodeEventType.VOICE_CONNECTION_ERROR: VoiceErrored,
    NodeEventType.AUDIO_PLAYER_ERROR: AudioPlayerErrored,
}


class EventRouter:
    """Moves gateway voice events to the node and node frames to sessions.

    Frames submitted from the socket are dispatched in background tasks, one
    chain per guild: frames for the same guild are handled in arrival order,
    while a slow subscriber for one guild never holds up another guild.
    """

    def __init__(self, registry: SessionRegistry[GuildSession], bus: EventBus) -> None:
        self._registry = registry
        self._bus = bus
        self._node: NodeConnection | None = None
        self._tails: dict[str | None, asyncio.Task[None]] = {}
        self._dispatch_tasks: set[asyncio.Task[None]] = set()

    def bind(self, node: NodeConnection) -> None:
        """Attach the node that gateway events are forwarded to."""
        self._node = node

    async def publish(self, event: DomainEvent) -> None:
        await self._bus.publish(event)

    async def forward_gateway_event(self, data: Any) -> bool:
        """Forward voice gateway events to the node unchanged.

        Only ``VOICE_SERVER_UPDATE`` and ``VOICE_STATE_UPDATE`` are forwarded;
        anything else is ignored. Returns whether a frame was written or queued.
        """
        if not isinstance(data, Mapping):
            return False
        event_type = GatewayEventType.from_tag(data.get("t"))
        if event_type is None or self._node is None:
            return False

        try:
            accepted = await self._node.send(dict(data))
        except NodeConnectionError as e:
            logger.warning(LogTemplates.GATEWAY_FORWARD_FAILED, event_type.value, e)
            return False

        if accepted:
            logger.debug(LogTemplates.GATEWAY_FORWARDED, event_type.value)
        return accepted

    @property
    def pending_dispatches(self) -> int:
        return len(self._dispatch_tasks)

    def submit_frame(self, frame: NodeFrame) -> asyncio.Task[None]:
        """Dispatch ``frame`` in the background, after earlier frames of its guild."""
        key = frame.guild_id
        task = asyncio.create_task(self._dispatch_after(self._tails.get(key), frame))
        self._tails[key] = task
        self._dispatch_tasks.add(task)
        task.add_done_callback(partial(self._on_dispatch_done, key, frame))
        return task

    async def _dispatch_after(self, previous: asyncio.Task[None] | None, frame: NodeFrame) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        await self.dispatch_frame(frame)

    def _on_dispatch_done(self, key: str | None, frame: NodeFrame, task: asyncio.Task[None]) -> None:
        self._dispatch_tasks.discard(task)
        if self._tails.get(key) is task:
            del self._tails[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(LogTemplates.FRAME_DISPATCH_FAILED, frame.t.value, exc_info=error)

    async def dispatch_frame(self, frame: NodeFrame) -> None:
        logger.debug(LogTemplates.FRAME_RECEIVED, frame.t.value)

        if frame.t == NodeEventType.READY:
            await self.publish(NodeReady(node=self._node))
            return

        session = self._registry.get(frame.guild_id) if frame.guild_id else None

        if frame.t.is_session_scoped:
            if session is None:
                logger.debug(LogTemplates.FRAME_NO_SESSION, frame.guild_id, frame.t.value)
                return
            session.handle_event(frame.t, frame.d)
            await self.publish(SESSION_EVENTS[frame.t](session=session, payload=frame.d))
            return

        await self.publish(VOICE_EVENTS[frame.t](payload=frame.d, session=session))
