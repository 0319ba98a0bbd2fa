"""discord.py bot that feeds gateway voice events to the Manager."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import discord
from discord.ext import commands

from discord_node_manager.application.manager import Manager
from discord_node_manager.config.settings import ManagerOptions
from discord_node_manager.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from discord_node_manager.config.settings import Settings

logger = logging.getLogger(__name__)


class NodeManagerBot(commands.Bot):
    def __init__(self, settings: Settings, **kwargs) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=settings.discord.command_prefix,
            intents=intents,
            help_command=None,
            enable_debug_events=True,
            **kwargs,
        )

        self.settings = settings
        self.manager = Manager(ManagerOptions(node=settings.node, send=self.send_voice_payload))

    async def on_ready(self) -> None:
        logger.info(LogTemplates.BOT_READY, self.user, self.user.id)
        await self.manager.init(self.user.id)

    async def on_socket_raw_receive(self, msg: str) -> None:
        try:
            data = json.loads(msg)
        except (TypeError, ValueError):
            logger.debug(LogTemplates.BOT_RAW_EVENT_UNPARSEABLE)
            return
        await self.manager.update_voice_state(data)

    async def send_voice_payload(self, guild_id: str, payload: dict[str, Any]) -> None:
        """Write a gateway payload on the shard connection that owns ``guild_id``."""
        ws = self._get_websocket(int(guild_id))
        if ws is None:
            logger.warning(LogTemplates.BOT_NO_WEBSOCKET, guild_id)
            return
        await ws.send_as_json(payload)

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)
        await self.manager.destroy_node()
        await super().close()


def create_bot(settings: Settings) -> NodeManagerBot:
    return NodeManagerBot(settings)
