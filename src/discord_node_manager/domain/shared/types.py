"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type is defined here once, so models can simply annotate
their fields::

    from discord_node_manager.domain.shared.types import GuildIdStr, NonEmptyStr

    class MyModel(BaseModel):
        guild_id: GuildIdStr
        name: NonEmptyStr
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BeforeValidator, Field


def _snowflake_to_str(v: Any) -> Any:
    """Accept integer snowflakes (as discord.py hands them out) and keep them as strings."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


# ── Identifiers ─────────────────────────────────────────────────────

GuildIdStr = Annotated[str, BeforeValidator(_snowflake_to_str), Field(pattern=r"^\d{1,20}$")]
"""Guild snowflake carried as an opaque numeric string."""

ChannelIdStr = Annotated[str, BeforeValidator(_snowflake_to_str), Field(pattern=r"^\d{1,20}$")]
"""Channel snowflake carried as an opaque numeric string."""


# ── Numeric constraints ─────────────────────────────────────────────

PortInt = Annotated[int, Field(ge=1, le=65535)]
"""TCP port: 1 … 65 535."""

TimeoutSeconds = Annotated[float, Field(gt=0.0, le=300.0)]
"""Timeout in seconds: (0 … 300]."""

ConnectAttempts = Annotated[int, Field(ge=1, le=50)]
"""Bounded number of socket connect attempts: 1 … 50."""

QueueSize = Annotated[int, Field(ge=1, le=10_000)]
"""Bounded queue length: 1 … 10 000."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

CommandPrefixStr = Annotated[str, Field(min_length=1, max_length=5)]
"""Bot command prefix: 1-5 characters."""


# ── Datetime constraints ────────────────────────────────────────────


def utcnow() -> datetime:
    return datetime.now(UTC)


def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
