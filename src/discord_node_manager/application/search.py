"""Resolves search queries against the node into a normalized SearchResult."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError

from discord_node_manager.domain.playback.entities import (
    PlaylistInfo,
    SearchQuery,
    SearchResult,
    Track,
)
from discord_node_manager.domain.playback.value_objects import SEARCH_IDENTIFIERS, SearchResultType
from discord_node_manager.domain.shared.exceptions import ProtocolError
from discord_node_manager.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_node_manager.infrastructure.node.connection import NodeConnection

logger = logging.getLogger(__name__)

SEARCH_PATH = "api/tracks/search"

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_.".
_QUERY_SAFE = "!~*'()"


class SearchResponse(BaseModel):
    """Body of ``GET /api/tracks/search``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    identifier: str
    results: list[dict[str, Any]]


class SearchResolver:
    def __init__(self, node: NodeConnection) -> None:
        self._node = node

    @staticmethod
    def build_path(query: SearchQuery) -> str:
        return (
            f"{SEARCH_PATH}?query={quote(query.query, safe=_QUERY_SAFE)}"
            f"&identifier={quote(query.identifier, safe='')}"
        )

    async def search(self, query: SearchQuery, requester: Any) -> SearchResult:
        """Search the node and normalize its answer.

        Raises:
            RequestError: The node rejected the request or did not answer.
            ProtocolError: The node answered with an unexpected body.
        """
        body = await self._node.make_request("GET", self.build_path(query))
        result = self.resolve(body, requester)
        logger.debug(
            LogTemplates.SEARCH_RESOLVED,
            query.query,
            query.identifier,
            result.type.value,
            len(result.tracks),
        )
        return result

    def resolve(self, body: Any, requester: Any) -> SearchResult:
        """Turn a search response body into a SearchResult.

        Flat searches (``ytsearch``/``scsearch``) keep the node's track dicts
        as-is. Any other identifier whose first result carries a ``tracks``
        list is a playlist: its metadata comes from that first result and each
        of its tracks is rebuilt with ``requester`` attached.
        """
        try:
            response = SearchResponse.model_validate(body)
        except ValidationError as e:
            raise ProtocolError(ErrorMessages.MALFORMED_SEARCH_RESPONSE, raw=body) from e

        if not response.results:
            return SearchResult(type=SearchResultType.NO_RESULT, tracks=[], requester=requester)

        first = response.results[0]
        nested = first.get("tracks")
        if response.identifier in SEARCH_IDENTIFIERS or not isinstance(nested, list):
            return SearchResult(
                type=SearchResultType.SEARCH_RESULT,
                tracks=response.results,
                requester=requester,
            )

        try:
            playlist = PlaylistInfo.model_validate(first)
            tracks = [Track.from_node(track, requester) for track in nested]
        except (ValidationError, AttributeError) as e:
            raise ProtocolError(ErrorMessages.MALFORMED_PLAYLIST, raw=body) from e

        return SearchResult(
            type=SearchResultType.PLAYLIST,
            playlist=playlist,
            tracks=tracks,
            requester=requester,
        )
