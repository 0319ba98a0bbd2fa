"""Core domain entities for the playback bounded context."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_node_manager.domain.playback.value_objects import (
    DEFAULT_SEARCH_IDENTIFIER,
    SearchResultType,
)
from discord_node_manager.domain.shared.types import ChannelIdStr, GuildIdStr, NonEmptyStr


class Track(BaseModel):
    """A playable track as described by the node.

    Duration, creation timestamp and thumbnail are backend-defined and copied
    through without interpretation. ``requested_by`` is attached locally since
    the node does not know who asked.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", arbitrary_types_allowed=True)

    url: str
    title: str | None = None
    thumbnail: str | None = None
    duration: Any = None
    author: str | None = None
    created_at: Any = None
    extractor: str | None = None
    requested_by: Any = None

    @classmethod
    def from_node(cls, data: dict[str, Any], requester: Any) -> Track:
        """Build a track from a node track object, attaching the requester."""
        return cls(
            url=data.get("url"),
            title=data.get("title"),
            thumbnail=data.get("thumbnail"),
            duration=data.get("duration"),
            author=data.get("author"),
            created_at=data.get("created_at"),
            extractor=data.get("extractor"),
            requested_by=requester,
        )


class PlaylistInfo(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | int | None = None
    title: str | None = None
    url: str | None = None
    author: str | None = None
    extractor: str | None = None


class SearchQuery(BaseModel):
    """Free-text query plus the source identifier the node should search with."""

    model_config = ConfigDict(frozen=True)

    query: NonEmptyStr
    identifier: NonEmptyStr = DEFAULT_SEARCH_IDENTIFIER


class SearchResult(BaseModel):
    """Normalized search result.

    ``tracks`` holds :class:`Track` objects for playlists and the node's raw
    track dicts for flat search results.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: SearchResultType
    tracks: list[Any] = Field(default_factory=list)
    playlist: PlaylistInfo | None = None
    requester: Any = None

    @property
    def is_empty(self) -> bool:
        return self.type == SearchResultType.NO_RESULT


class SessionOptions(BaseModel):
    """Options used to create a guild session."""

    model_config = ConfigDict(frozen=True)

    guild_id: GuildIdStr
    voice_channel_id: ChannelIdStr | None = None
    text_channel_id: ChannelIdStr | None = None
    self_deaf: bool = True
    self_mute: bool = False
