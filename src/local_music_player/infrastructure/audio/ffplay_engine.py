"""
FFplay Playback Engine

Infrastructure component that plays a queue of local files through one
``ffplay`` subprocess per track.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import signal
import time
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from ...application.interfaces.playback_engine import PlaybackEngine, PlaybackEngineListener
from ...config.settings import PlaybackSettings
from ...domain.music.entities import Track
from ...domain.music.value_objects import PlaybackPhase
from ...domain.shared.constants import AudioConstants
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


def playable_location(uri: str) -> str:
    """Turn a ``file://`` URI into a local path; other locations pass through."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return url2pathname(unquote(parsed.path))
    return uri


@dataclass
class FfplayConfig:
    """Command line settings for ffplay."""

    executable: str = "ffplay"
    base_args: tuple[str, ...] = AudioConstants.FFPLAY_BASE_ARGS
    terminate_timeout_s: float = AudioConstants.PROCESS_TERMINATE_TIMEOUT_S

    def build_command(self, track: Track, start_ms: int) -> list[str]:
        """Build the argv for playing ``track`` from ``start_ms``."""
        return [
            self.executable,
            *self.base_args,
            "-ss",
            f"{start_ms / 1000:.3f}",
            playable_location(track.uri),
        ]


class FfplayPlaybackEngine(PlaybackEngine):
    """Queue player backed by ffplay subprocesses.

    Pause and resume use SIGSTOP/SIGCONT, so the playback position is tracked
    with a monotonic clock rather than read from the process. When a track
    finishes on its own the engine advances by itself and reports the
    transition to its listeners.
    """

    def __init__(
        self,
        settings: PlaybackSettings | None = None,
        config: FfplayConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Playback settings from application config.
            config: ffplay-specific configuration.
            rng: Random source for native shuffle.
        """
        self._settings = settings or PlaybackSettings()
        self._config = config or FfplayConfig(executable=self._settings.ffplay_path)
        self._rng = rng or random.Random()

        self._queue: list[Track] = []
        self._index = 0
        self._phase = PlaybackPhase.STOPPED
        self._shuffle = False
        self._repeat_one = False

        self._process: asyncio.subprocess.Process | None = None
        self._watchers: set[asyncio.Task[None]] = set()
        self._paused = False
        self._offset_ms = 0
        self._started_at = 0.0

        self._listeners: list[PlaybackEngineListener] = []

    # ---- Listeners ----

    def add_listener(self, listener: PlaybackEngineListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: PlaybackEngineListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _emit(self, callback: str, *args: object) -> None:
        for listener in list(self._listeners):
            try:
                await getattr(listener, callback)(*args)
            except Exception:
                logger.exception(LogTemplates.ENGINE_LISTENER_ERROR)

    async def _set_phase(self, phase: PlaybackPhase) -> None:
        was_playing = self._phase.is_playing
        self._phase = phase
        if was_playing != phase.is_playing:
            await self._emit("on_playing_changed", phase.is_playing)
        await self._emit("on_phase_changed", phase)

    # ---- Queries ----

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def current_track(self) -> Track | None:
        if 0 <= self._index < len(self._queue):
            return self._queue[self._index]
        return None

    def has_next(self) -> bool:
        if self._shuffle:
            return len(self._queue) > 1
        return self._index + 1 < len(self._queue)

    def has_previous(self) -> bool:
        return self._index > 0

    def is_playing(self) -> bool:
        return self._process is not None and not self._paused

    def position_ms(self) -> int:
        position = self._offset_ms
        if self.is_playing():
            position += int((time.monotonic() - self._started_at) * 1000)
        duration = self.duration_ms()
        return min(position, duration) if duration > 0 else position

    def duration_ms(self) -> int:
        track = self.current_track
        return track.duration_ms if track else 0

    # ---- Queue and modes ----

    async def load_queue(
        self, tracks: Sequence[Track], start_index: int, start_position_ms: int = 0
    ) -> None:
        await self._terminate()
        self._queue = list(tracks)
        self._index = start_index if 0 <= start_index < len(self._queue) else 0
        self._offset_ms = max(0, start_position_ms)
        self._paused = False
        logger.debug(
            LogTemplates.ENGINE_QUEUE_LOADED, len(self._queue), self._index, self._offset_ms
        )

    async def set_shuffle(self, enabled: bool) -> None:
        self._shuffle = enabled

    async def set_repeat_one(self, enabled: bool) -> None:
        self._repeat_one = enabled

    # ---- Transport ----

    async def play(self) -> None:
        if self.current_track is None:
            return
        if self._process is not None and self._paused:
            self._signal(signal.SIGCONT)
            self._paused = False
            self._started_at = time.monotonic()
            await self._set_phase(PlaybackPhase.PLAYING)
            return
        if self._process is None:
            await self._spawn()

    async def pause(self) -> None:
        if not self.is_playing():
            return
        self._offset_ms = self.position_ms()
        self._signal(signal.SIGSTOP)
        self._paused = True
        await self._set_phase(PlaybackPhase.PAUSED)

    async def stop(self) -> None:
        await self._terminate()
        self._offset_ms = 0
        self._paused = False
        await self._set_phase(PlaybackPhase.STOPPED)

    async def seek(self, position_ms: int) -> None:
        was_playing = self.is_playing()
        await self._terminate()
        self._offset_ms = max(0, position_ms)
        if was_playing:
            await self._spawn()

    async def next(self) -> None:
        if self.has_next():
            await self._move_to(self._next_index())

    async def previous(self) -> None:
        if self.has_previous():
            await self._move_to(self._index - 1)

    async def release(self) -> None:
        await self._terminate()
        if self._watchers:
            await asyncio.gather(*list(self._watchers), return_exceptions=True)
        self._listeners.clear()
        self._queue = []
        self._index = 0
        self._phase = PlaybackPhase.STOPPED
        logger.info(LogTemplates.ENGINE_RELEASED)

    def _next_index(self) -> int:
        if self._shuffle and len(self._queue) > 1:
            return self._rng.choice([i for i in range(len(self._queue)) if i != self._index])
        return self._index + 1

    async def _move_to(self, index: int) -> None:
        was_playing = self.is_playing()
        await self._terminate()
        self._index = index
        self._offset_ms = 0
        self._paused = False
        await self._emit("on_track_transition", self._queue[index].id)
        if was_playing:
            await self._spawn()

    # ---- Process management ----

    async def _spawn(self) -> None:
        track = self._queue[self._index]
        command = self._config.build_command(track, self._offset_ms)
        await self._set_phase(PlaybackPhase.LOADING)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            logger.exception(LogTemplates.ENGINE_SPAWN_FAILED, track.display_title)
            await self._set_phase(PlaybackPhase.ERROR)
            return

        self._process = process
        self._paused = False
        self._started_at = time.monotonic()
        logger.debug(LogTemplates.ENGINE_SPAWNED, track.display_title, process.pid)

        watcher = asyncio.create_task(self._watch(process), name=f"ffplay-{process.pid}")
        self._watchers.add(watcher)
        watcher.add_done_callback(self._watchers.discard)
        await self._set_phase(PlaybackPhase.PLAYING)

    async def _watch(self, process: asyncio.subprocess.Process) -> None:
        returncode = await process.wait()
        if process is not self._process:
            # Replaced or terminated by us.
            return
        logger.debug(LogTemplates.ENGINE_PROCESS_EXITED, returncode)
        self._process = None
        await self._on_track_finished()

    async def _on_track_finished(self) -> None:
        self._offset_ms = 0
        if self._repeat_one:
            await self._spawn()
            return
        if self.has_next():
            self._index = self._next_index()
            await self._emit("on_track_transition", self._queue[self._index].id)
            await self._spawn()
            return

        logger.info(LogTemplates.ENGINE_QUEUE_FINISHED)
        await self._emit("on_track_transition", None)
        await self._set_phase(PlaybackPhase.STOPPED)

    def _signal(self, signum: int) -> None:
        if self._process is None:
            return
        with contextlib.suppress(ProcessLookupError):
            self._process.send_signal(signum)

    async def _terminate(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.returncode is not None:
            return

        with contextlib.suppress(ProcessLookupError):
            process.terminate()
            # A stopped process only acts on SIGTERM once continued.
            if self._paused:
                process.send_signal(signal.SIGCONT)
        try:
            await asyncio.wait_for(process.wait(), timeout=self._config.terminate_timeout_s)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
