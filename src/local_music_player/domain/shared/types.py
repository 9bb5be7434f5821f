"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the domain is defined here once,
so models can simply annotate their fields::

    from local_music_player.domain.shared.types import SongId, NonNegativeInt

    class MyModel(BaseModel):
        song_id: SongId
        plays: NonNegativeInt
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

from .messages import ErrorMessages

# ── Numeric constraints ─────────────────────────────────────────────

SONG_ID_LIMIT = 2**63

SongId = Annotated[int, Field(ge=0, lt=SONG_ID_LIMIT)]
"""Media index song identifier; fits a signed 64-bit integer."""


def is_song_id(value: object) -> bool:
    """True for a plain int that fits ``SongId``."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < SONG_ID_LIMIT


NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

DurationMs = Annotated[int, Field(ge=0)]
"""Duration or playback position in milliseconds."""

FileBytes = Annotated[int, Field(ge=0)]
"""File size in bytes: >= 0."""

EpochSeconds = Annotated[int, Field(ge=0)]
"""Unix timestamp in seconds."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
