"""Domain events raised by playback and playlist changes, and the bus that delivers them."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from local_music_player.domain.shared.datetime_utils import utcnow
from local_music_player.domain.shared.messages import LogTemplates
from local_music_player.domain.shared.types import (
    DurationMs,
    NonEmptyStr,
    NonNegativeInt,
    SongId,
    UtcDatetimeField,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="DomainEvent")
EventHandler = Callable[[T], Awaitable[None]]


class DomainEvent(BaseModel):
    """Immutable record of something that happened, stamped with an id and UTC time."""

    model_config = ConfigDict(frozen=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: UtcDatetimeField = Field(default_factory=utcnow)


# === Playback Events ===


class TrackStartedPlaying(DomainEvent):
    track_id: SongId
    track_title: str = ""
    context_category: str = ""
    context_name: str | None = None
    duration_ms: DurationMs = 0


class TrackTransitioned(DomainEvent):
    track_id: SongId
    track_title: str = ""
    queue_index: NonNegativeInt = 0


class PlaybackModesChanged(DomainEvent):
    shuffle_enabled: bool = False
    repeat_enabled: bool = False


# === Playlist Events ===


class PlaylistSaved(DomainEvent):
    playlist_id: NonEmptyStr
    song_count: NonNegativeInt = 0


class PlaylistDeleted(DomainEvent):
    playlist_id: NonEmptyStr


# === Event Bus ===


class EventBus:
    """Routes each published event to the handlers registered for its exact type.

    All handlers for one event run concurrently inside a TaskGroup; a handler
    that raises is logged and the others still complete.
    """

    def __init__(self) -> None:
        self._subscriptions: defaultdict[type[DomainEvent], list[EventHandler[Any]]] = (
            defaultdict(list)
        )

    def subscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        self._subscriptions[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: EventHandler[T]) -> None:
        registered = self._subscriptions.get(event_type, [])
        if handler in registered:
            registered.remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        targets = tuple(self._subscriptions.get(type(event), ()))
        if not targets:
            return

        name = type(event).__name__
        logger.debug(LogTemplates.EVENT_DISPATCHED, name, len(targets))
        async with asyncio.TaskGroup() as group:
            for handler in targets:
                group.create_task(self._deliver(name, handler, event))

    @staticmethod
    async def _deliver(name: str, handler: EventHandler[Any], event: DomainEvent) -> None:
        try:
            await handler(event)
        except Exception:
            logger.exception(
                LogTemplates.EVENT_HANDLER_ERROR, name, getattr(handler, "__qualname__", handler)
            )

    def clear(self) -> None:
        self._subscriptions.clear()


_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Return the process-wide bus, creating it on first use."""
    global _bus
    if _bus is None:
        _bus = EventBus()
    return _bus


def reset_event_bus() -> None:
    """Drop the process-wide bus and all its subscriptions."""
    global _bus
    if _bus is not None:
        _bus.clear()
    _bus = None
