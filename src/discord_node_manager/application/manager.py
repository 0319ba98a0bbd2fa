"""The Manager: owns the node connection and every guild session."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from discord_node_manager.application.router import EventRouter
from discord_node_manager.application.search import SearchResolver
from discord_node_manager.application.session import GuildSession
from discord_node_manager.config.settings import ManagerOptions
from discord_node_manager.domain.playback.entities import SearchQuery, SearchResult, SessionOptions
from discord_node_manager.domain.playback.registry import SessionRegistry
from discord_node_manager.domain.shared.events import DomainEvent, EventBus, EventHandler
from discord_node_manager.domain.shared.exceptions import ConfigurationError
from discord_node_manager.domain.shared.messages import ErrorMessages, LogTemplates
from discord_node_manager.infrastructure.node.connection import NodeConnection

logger = logging.getLogger(__name__)


class Manager:
    """Coordinates guild sessions against a single audio node.

    The node connection is created here but not opened until :meth:`init`.
    Notifications are published on :attr:`events`::

        manager = Manager({
            "node": {"host": "localhost", "port": 3000, "password": "secret"},
            "send": send_to_shard,
        })
        manager.subscribe(TrackStarted, on_track_start)
        await manager.init(bot.user.id)
    """

    def __init__(self, options: ManagerOptions | Mapping[str, Any]) -> None:
        self.options = self._validate_options(options)
        self.events = EventBus()
        self.players: SessionRegistry[GuildSession] = SessionRegistry()
        self.router = EventRouter(self.players, self.events)
        self.node = NodeConnection(self.options.node, self.router)
        self.router.bind(self.node)
        self.resolver = SearchResolver(self.node)
        self._initiated = False

        logger.info(
            LogTemplates.MANAGER_CREATED,
            self.options.node.identifier,
            self.options.node.host,
            self.options.node.port,
        )

    @staticmethod
    def _validate_options(options: ManagerOptions | Mapping[str, Any]) -> ManagerOptions:
        if isinstance(options, ManagerOptions):
            return options
        try:
            return ManagerOptions.model_validate(options)
        except ValidationError as e:
            field = ".".join(str(part) for part in e.errors()[0]["loc"]) or None
            raise ConfigurationError(
                ErrorMessages.INVALID_MANAGER_OPTIONS.format(errors=e), field=field
            ) from e

    @property
    def initiated(self) -> bool:
        return self._initiated

    @property
    def access_token(self) -> str | None:
        return self.node.access_token

    async def init(self, client_id: str | int | None = None) -> Manager:
        """Open the node connection. Later calls are no-ops."""
        if self._initiated:
            logger.debug(LogTemplates.MANAGER_ALREADY_INITIALIZED)
            return self

        self._initiated = True
        if client_id:
            self.options = self.options.model_copy(update={"client_id": str(client_id)})
        await self.node.connect(self.options.client_id)
        logger.info(LogTemplates.MANAGER_INITIALIZED, self.options.client_id)
        return self

    async def search(
        self, query: SearchQuery | str, requester: Any = None, identifier: str | None = None
    ) -> SearchResult:
        """Search the node for tracks or playlists.

        ``query`` may be a plain string, searched with ``identifier`` (or the
        default YouTube search identifier).
        """
        if isinstance(query, str):
            query = SearchQuery(query=query) if identifier is None else SearchQuery(
                query=query, identifier=identifier
            )
        return await self.resolver.search(query, requester)

    def create(self, options: SessionOptions | Mapping[str, Any]) -> GuildSession:
        """Return the guild's session, creating it on first use.

        When a session already exists the given options are ignored.
        """
        if not isinstance(options, SessionOptions):
            options = SessionOptions.model_validate(options)
        return self.players.get_or_create(options, lambda opts: GuildSession(self, opts))

    def get(self, guild_id: str | int) -> GuildSession | None:
        return self.players.get(str(guild_id))

    def remove(self, guild_id: str | int, session: GuildSession | None = None) -> bool:
        return self.players.remove(str(guild_id), session)

    async def destroy_node(self) -> None:
        await self.node.destroy()

    async def update_voice_state(self, data: Any) -> bool:
        """Forward a raw gateway event to the node if it is a voice update.

        Example::

            @bot.event
            async def on_socket_raw_receive(msg):
                await manager.update_voice_state(json.loads(msg))
        """
        return await self.router.forward_gateway_event(data)

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler[Any]) -> None:
        self.events.subscribe(event_type, handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler[Any]) -> None:
        self.events.unsubscribe(event_type, handler)
