"""Frames exchanged with the node over its persistent socket."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from discord_node_manager.domain.playback.value_objects import NodeEventType
from discord_node_manager.domain.shared.exceptions import ProtocolError
from discord_node_manager.domain.shared.messages import ErrorMessages


class NodeFrame(BaseModel):
    """Inbound ``{"t": <type>, "d": {...}}`` frame."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    t: NodeEventType
    d: dict[str, Any] = Field(default_factory=dict)

    @field_validator("d", mode="before")
    @classmethod
    def _coerce_null_payload(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def guild_id(self) -> str | None:
        guild_id = self.d.get("guild_id")
        return None if guild_id is None else str(guild_id)


def decode_frame(raw: str | bytes) -> NodeFrame:
    """Decode a socket message, raising ProtocolError for anything malformed or unknown."""
    try:
        return NodeFrame.model_validate_json(raw)
    except ValidationError as e:
        raise ProtocolError(ErrorMessages.MALFORMED_FRAME, raw=raw) from e
