"""Guild-keyed session registry.

At most one live session exists per guild. Lookups and the insert-if-absent
step of :meth:`SessionRegistry.get_or_create` run under a single lock, so two
racing creators for the same guild always receive the same session.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from discord_node_manager.domain.playback.entities import SessionOptions
from discord_node_manager.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

S = TypeVar("S")


class SessionRegistry(Generic[S]):
    def __init__(self) -> None:
        self._sessions: dict[str, S] = {}
        self._lock = threading.Lock()

    def get_or_create(self, options: SessionOptions, factory: Callable[[SessionOptions], S]) -> S:
        """Return the guild's session, building one with ``factory`` if absent.

        Options of a call that finds an existing session are ignored. Errors
        raised by ``factory`` propagate and leave the registry unchanged.
        """
        with self._lock:
            session = self._sessions.get(options.guild_id)
            if session is not None:
                return session

            session = factory(options)
            self._sessions[options.guild_id] = session

        logger.debug(LogTemplates.SESSION_CREATED, options.guild_id)
        return session

    def get(self, guild_id: str) -> S | None:
        with self._lock:
            return self._sessions.get(str(guild_id))

    def remove(self, guild_id: str, session: S | None = None) -> bool:
        """Remove the guild's session.

        When ``session`` is given, the entry is removed only if it is still
        that exact object.
        """
        key = str(guild_id)
        with self._lock:
            current = self._sessions.get(key)
            if current is None or (session is not None and current is not session):
                return False
            del self._sessions[key]

        logger.debug(LogTemplates.SESSION_REMOVED, key)
        return True

    def guild_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def values(self) -> list[S]:
        with self._lock:
            return list(self._sessions.values())

    def clear(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count

    def __contains__(self, guild_id: object) -> bool:
        with self._lock:
            return str(guild_id) in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __iter__(self) -> Iterator[S]:
        return iter(self.values())
