"""Typed notification bus for node and session events."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_node_manager.domain.shared.messages import LogTemplates
from discord_node_manager.domain.shared.types import NonEmptyStr, UtcDatetimeField, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")
EventHandler = Callable[[T], Awaitable[None]]


class DomainEvent(BaseModel):
    """Base class for all events published by a manager."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: UtcDatetimeField = Field(default_factory=utcnow)


# === Connection Events ===


class ConnectionEvent(DomainEvent):
    """Node connection lifecycle; carries the connection object, never a session."""

    node: Any


class NodeConnected(ConnectionEvent):
    pass


class NodeDisconnected(ConnectionEvent):
    code: int | None = None


class NodeError(ConnectionEvent):
    error: Exception


class NodeReady(ConnectionEvent):
    pass


# === Session Events ===


class SessionEvent(DomainEvent):
    """Playback lifecycle for one guild; ``session`` is the guild's GuildSession."""

    session: Any
    payload: dict[str, Any] = Field(default_factory=dict)


class TrackAdded(SessionEvent):
    pass


class TracksAdded(SessionEvent):
    pass


class TrackStarted(SessionEvent):
    pass


class TrackEnded(SessionEvent):
    pass


class TrackErrored(SessionEvent):
    pass


class QueueEnded(SessionEvent):
    pass


# === Voice Events ===


class VoiceEvent(DomainEvent):
    """Voice connection state reported by the node; the session may be unknown."""

    payload: dict[str, Any] = Field(default_factory=dict)
    session: Any = None


class VoiceReady(VoiceEvent):
    pass


class VoiceDisconnected(VoiceEvent):
    pass


class VoiceErrored(VoiceEvent):
    pass


class AudioPlayerErrored(VoiceEvent):
    pass


# === Event Bus ===


class EventBus:
    """In-memory pub/sub event bus.

    Handlers are called concurrently. Exceptions in handlers are logged
    but do not prevent other handlers from running.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler[Any]]] = defaultdict(list)

    def subscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed handler to: %s", event_type.__name__)

    def unsubscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        handlers = self._handlers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            logger.debug("Unsubscribed handler from %s", event_type.__name__)

    async def publish(self, event: DomainEvent) -> None:
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logger.debug("No handlers for %s", event_type.__name__)
            return

        logger.debug("Publishing %s to %d handlers", event_type.__name__, len(handlers))

        async def safe_call(handler: EventHandler[Any]) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.exception(LogTemplates.EVENT_HANDLER_ERROR, event_type.__name__, e)

        async with asyncio.TaskGroup() as tg:
            for handler in handlers:
                tg.create_task(safe_call(handler))

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
        logger.debug("Cleared all event handlers")
