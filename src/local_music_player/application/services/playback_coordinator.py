"""Playback Coordinator - keeps the active playlist context and the engine queue in step."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from ...config.settings import PlaybackSettings
from ...domain.music.entities import PlayerState, PlaylistContext, Track
from ...domain.music.services import index_of_track, shuffle_playlist
from ...domain.music.value_objects import PlaybackPhase
from ...domain.shared.events import (
    PlaybackModesChanged,
    TrackStartedPlaying,
    TrackTransitioned,
    get_event_bus,
)
from ...domain.shared.exceptions import InvalidOperationError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ..interfaces.playback_engine import PlaybackEngineListener

if TYPE_CHECKING:
    from ...domain.music.repository import PlaylistRepository
    from ..interfaces.playback_engine import PlaybackEngine

logger = logging.getLogger(__name__)

StateListener = Callable[[PlayerState], None]


class PlaybackCoordinator(PlaybackEngineListener):
    """Owns "which context is playing, in what order, at which index".

    All methods are expected to run on a single event loop; engine callbacks
    arrive on the same loop, so no locking is needed. The coordinator shuffles
    queues itself and only forwards the shuffle flag to the engine when nothing
    has been played yet.
    """

    def __init__(
        self,
        *,
        engine: PlaybackEngine,
        playlist_repository: PlaylistRepository,
        settings: PlaybackSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._engine = engine
        self._playlists = playlist_repository
        self._settings = settings or PlaybackSettings()
        self._rng = rng or random.Random()

        self._state = PlayerState()
        self._queue: list[Track] = []
        self._current_index = 0
        self._context: PlaylistContext | None = None
        self._native_shuffle = False

        self._listeners: list[StateListener] = []
        self._poll_task: asyncio.Task[None] | None = None
        self._pending_writes: set[asyncio.Task[None]] = set()
        self._history_lock = asyncio.Lock()
        self._closed = False

        self._engine.add_listener(self)

    # ---- Published state ----

    @property
    def state(self) -> PlayerState:
        return self._state

    def get_state(self) -> PlayerState:
        return self._state

    @property
    def queue(self) -> tuple[Track, ...]:
        return tuple(self._queue)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def context(self) -> PlaylistContext | None:
        return self._context

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for every published state; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: PlayerState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(LogTemplates.COORDINATOR_LISTENER_ERROR)

    # ---- Starting playback ----

    async def start_playlist(
        self,
        tracks: Sequence[Track],
        start_index: int = 0,
        context: PlaylistContext | None = None,
    ) -> None:
        """Load ``tracks`` into the engine and play from ``start_index``.

        With shuffle on, the selected track is moved to the front of a shuffled
        order and playback starts at index 0. Invalid input is ignored.
        """
        self._ensure_open()
        tracks = list(tracks)
        if not tracks or not 0 <= start_index < len(tracks):
            logger.warning(LogTemplates.COORDINATOR_INVALID_START, len(tracks), start_index)
            return

        self._context = context or PlaylistContext.all_songs_of(tracks)

        if self._state.shuffle_enabled:
            queue = shuffle_playlist(tracks, start_index, self._rng)
            index = 0
        else:
            queue = tracks
            index = start_index

        await self._load_engine_queue(queue, index)
        await self._engine.play()

        # The phase itself follows from the engine callbacks.
        track = queue[index]
        self._publish(
            self._state.evolve(
                current_track=track,
                position_ms=0,
                duration_ms=track.duration_ms,
            )
        )
        self._record_recently_played(track.id)

        logger.info(
            LogTemplates.COORDINATOR_PLAYLIST_STARTED,
            self._context.category.value,
            track.display_title,
            self._state.shuffle_enabled,
        )
        await get_event_bus().publish(
            TrackStartedPlaying(
                track_id=track.id,
                track_title=track.display_title,
                context_category=self._context.category.value,
                context_name=self._context.item_name,
                duration_ms=track.duration_ms,
            )
        )

    async def play_track(self, track: Track) -> None:
        """Play a single track as its own one-song session."""
        await self.start_playlist([track], 0)

    # ---- Transport ----

    async def toggle_play_pause(self) -> None:
        if self._engine.is_playing():
            await self._engine.pause()
        else:
            await self._engine.play()

    async def stop(self) -> None:
        await self._engine.stop()
        self._publish(self._state.evolve(phase=PlaybackPhase.STOPPED, position_ms=0))

    async def seek_to(self, position_ms: int) -> None:
        position_ms = max(0, position_ms)
        await self._engine.seek(position_ms)
        self._publish(self._state.evolve(position_ms=position_ms))

    async def skip_to_next(self) -> None:
        # The published track follows from the engine's transition event.
        if self._engine.has_next():
            await self._engine.next()

    async def skip_to_previous(self) -> None:
        if self._engine.has_previous():
            await self._engine.previous()

    # ---- Modes ----

    async def set_shuffle_enabled(self, enabled: bool) -> None:
        """Reorder the active queue around the current track, keeping position and phase."""
        if enabled:
            await self.set_repeat_enabled(False)

        context = self._context
        current = self._state.current_track
        if context is not None and self._queue and current is not None:
            if enabled:
                pivot = index_of_track(context.all_songs, current.id)
                if pivot >= 0:
                    new_order = shuffle_playlist(context.all_songs, pivot, self._rng)
                else:
                    new_order = self._rng.sample(context.all_songs, len(context.all_songs))
            else:
                new_order = list(context.original_order)
            await self._rebuild_queue(new_order, current)
        else:
            logger.debug(LogTemplates.COORDINATOR_SHUFFLE_FORWARDED, enabled)
            await self._engine.set_shuffle(enabled)
            self._native_shuffle = enabled

        self._publish(self._state.evolve(shuffle_enabled=enabled))
        logger.info(LogTemplates.COORDINATOR_SHUFFLE_CHANGED, enabled)
        await self._announce_modes()

    async def set_repeat_enabled(self, enabled: bool) -> None:
        """Toggle repeat-one; enabling it turns shuffle off and restores the original order."""
        was_shuffled = self._state.shuffle_enabled

        if enabled:
            await self._engine.set_shuffle(False)
            self._native_shuffle = False
            self._publish(self._state.evolve(shuffle_enabled=False))

            context = self._context
            current = self._state.current_track
            if was_shuffled and context is not None and current is not None:
                await self._rebuild_queue(list(context.original_order), current)

        await self._engine.set_repeat_one(enabled)
        self._publish(self._state.evolve(repeat_enabled=enabled))
        logger.info(LogTemplates.COORDINATOR_REPEAT_CHANGED, enabled)
        await self._announce_modes()

    async def _announce_modes(self) -> None:
        await get_event_bus().publish(
            PlaybackModesChanged(
                shuffle_enabled=self._state.shuffle_enabled,
                repeat_enabled=self._state.repeat_enabled,
            )
        )

    async def _rebuild_queue(self, new_order: Sequence[Track], current: Track) -> None:
        index = index_of_track(new_order, current.id)
        if index < 0:
            logger.debug(LogTemplates.COORDINATOR_TRACK_NOT_IN_QUEUE, current.id)
            return

        position = max(0, self._engine.position_ms())
        was_playing = self._state.phase == PlaybackPhase.PLAYING

        await self._load_engine_queue(new_order, index, position)
        if was_playing:
            await self._engine.play()
        logger.debug(LogTemplates.COORDINATOR_QUEUE_REBUILT, len(new_order), index, position)

    async def _load_engine_queue(
        self, queue: Sequence[Track], index: int, position_ms: int = 0
    ) -> None:
        # Queues are already in play order; the engine's own shuffle must not reorder them.
        if self._native_shuffle:
            await self._engine.set_shuffle(False)
            self._native_shuffle = False

        self._queue = list(queue)
        self._current_index = index
        await self._engine.load_queue(self._queue, index, position_ms)

    # ---- Engine events ----

    async def on_track_transition(self, track_id: int | None) -> None:
        if track_id is None:
            return

        index = index_of_track(self._queue, track_id)
        if index < 0:
            logger.debug(LogTemplates.COORDINATOR_TRANSITION_UNRESOLVED, track_id)
            return

        track = self._queue[index]
        self._current_index = index
        self._publish(
            self._state.evolve(current_track=track, position_ms=0, duration_ms=track.duration_ms)
        )
        logger.debug(LogTemplates.COORDINATOR_TRANSITION, track.display_title, index)
        await get_event_bus().publish(
            TrackTransitioned(track_id=track.id, track_title=track.display_title, queue_index=index)
        )

    async def on_playing_changed(self, is_playing: bool) -> None:
        phase = PlaybackPhase.PLAYING if is_playing else PlaybackPhase.PAUSED
        self._publish(self._state.evolve(phase=phase))

    async def on_phase_changed(self, phase: PlaybackPhase) -> None:
        self._publish(self._state.evolve(phase=phase))

    # ---- Position polling ----

    def start(self) -> None:
        """Start the position polling loop on the running event loop."""
        self._ensure_open()
        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_positions(), name="position-poll")

    async def _poll_positions(self) -> None:
        interval = self._settings.position_poll_interval_s
        logger.debug(LogTemplates.COORDINATOR_POLL_STARTED, interval)
        try:
            while True:
                await asyncio.sleep(interval)
                self.refresh_position()
        finally:
            logger.debug(LogTemplates.COORDINATOR_POLL_STOPPED)

    def refresh_position(self) -> None:
        """Republish position and duration while the engine is playing."""
        if not self._engine.is_playing():
            return
        self._publish(
            self._state.evolve(
                phase=PlaybackPhase.PLAYING,
                current_track=self._current_track(),
                position_ms=max(0, self._engine.position_ms()),
                duration_ms=max(0, self._engine.duration_ms()),
            )
        )

    def _current_track(self) -> Track | None:
        if 0 <= self._current_index < len(self._queue):
            return self._queue[self._current_index]
        return self._state.current_track

    # ---- Recently played ----

    def _record_recently_played(self, song_id: int) -> None:
        task = asyncio.create_task(self._write_recently_played(song_id))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_recently_played(self, song_id: int) -> None:
        try:
            async with self._history_lock:
                saved = await self._playlists.add_to_recently_played(song_id)
        except Exception:
            logger.exception(LogTemplates.COORDINATOR_HISTORY_WRITE_FAILED, song_id)
            return
        if not saved:
            logger.warning(LogTemplates.COORDINATOR_HISTORY_WRITE_FAILED, song_id)

    async def drain_pending_writes(self) -> None:
        """Wait for outstanding recently-played writes."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    # ---- Lifecycle ----

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidOperationError(
                operation="use coordinator",
                current_state="closed",
                message=ErrorMessages.COORDINATOR_CLOSED,
            )

    async def close(self) -> None:
        """Stop polling and flush writes, then release the engine."""
        if self._closed:
            return
        self._closed = True

        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None

        await self.drain_pending_writes()
        self._engine.remove_listener(self)
        await self._engine.release()
        logger.info(LogTemplates.COORDINATOR_CLOSED)
