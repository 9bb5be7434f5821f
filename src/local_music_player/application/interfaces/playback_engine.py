"""Port interface for the audio playback engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from local_music_player.domain.shared.types import DurationMs, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import PlaybackPhase


class PlaybackEngineListener(ABC):
    """Callbacks an engine delivers on the event loop that owns the coordinator."""

    @abstractmethod
    async def on_track_transition(self, track_id: int | None) -> None:
        """The engine moved to the queue entry with ``track_id`` (None when the queue ended)."""
        ...

    @abstractmethod
    async def on_playing_changed(self, is_playing: bool) -> None:
        ...

    @abstractmethod
    async def on_phase_changed(self, phase: "PlaybackPhase") -> None:
        ...


class PlaybackEngine(ABC):
    """Interface for an engine that plays an ordered queue of tracks."""

    @abstractmethod
    async def load_queue(
        self,
        tracks: Sequence["Track"],
        start_index: NonNegativeInt,
        start_position_ms: DurationMs = 0,
    ) -> None:
        """Replace the queue and prepare ``start_index`` without starting playback."""
        ...

    @abstractmethod
    async def play(self) -> None:
        ...

    @abstractmethod
    async def pause(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def seek(self, position_ms: DurationMs) -> None:
        ...

    @abstractmethod
    async def next(self) -> None:
        """Move to the next queue entry."""
        ...

    @abstractmethod
    async def previous(self) -> None:
        """Move to the previous queue entry."""
        ...

    @abstractmethod
    def has_next(self) -> bool:
        ...

    @abstractmethod
    def has_previous(self) -> bool:
        ...

    @abstractmethod
    async def set_shuffle(self, enabled: bool) -> None:
        """Toggle the engine's own shuffle order over the loaded queue."""
        ...

    @abstractmethod
    async def set_repeat_one(self, enabled: bool) -> None:
        """Toggle repeating the current queue entry."""
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def position_ms(self) -> int:
        ...

    @abstractmethod
    def duration_ms(self) -> int:
        ...

    @abstractmethod
    def add_listener(self, listener: PlaybackEngineListener) -> None:
        ...

    @abstractmethod
    def remove_listener(self, listener: PlaybackEngineListener) -> None:
        ...

    @abstractmethod
    async def release(self) -> None:
        """Stop playback and free engine resources; the engine is unusable afterwards."""
        ...
