import pytest
import pytest_asyncio

from local_music_player.application.interfaces.playback_engine import PlaybackEngine
from local_music_player.domain.music.entities import Track
from local_music_player.domain.music.value_objects import PlaybackPhase

# ============================================================================
# Fake Playback Engine
# ============================================================================


class FakePlaybackEngine(PlaybackEngine):
    """In-process engine that records every call and emits listener callbacks.

    ``next``/``previous`` emit a track transition like a real engine would;
    ``emit_transition`` lets tests simulate arbitrary engine events.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.queue: list[Track] = []
        self.index = 0
        self.playing = False
        self.shuffle = False
        self.repeat_one = False
        self.position = 0
        self.released = False
        self.listeners: list = []

    # ---- Test helpers ----

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    @property
    def queue_ids(self) -> list[int]:
        return [track.id for track in self.queue]

    def loads(self) -> list[tuple]:
        return [call for call in self.calls if call[0] == "load_queue"]

    async def emit_transition(self, track_id: int | None) -> None:
        for listener in list(self.listeners):
            await listener.on_track_transition(track_id)

    async def emit_phase(self, phase: PlaybackPhase) -> None:
        for listener in list(self.listeners):
            await listener.on_phase_changed(phase)

    async def _emit_playing(self, is_playing: bool) -> None:
        for listener in list(self.listeners):
            await listener.on_playing_changed(is_playing)
            await listener.on_phase_changed(
                PlaybackPhase.PLAYING if is_playing else PlaybackPhase.PAUSED
            )

    # ---- PlaybackEngine ----

    async def load_queue(self, tracks, start_index, start_position_ms=0):
        self.calls.append(("load_queue", [t.id for t in tracks], start_index, start_position_ms))
        self.queue = list(tracks)
        self.index = start_index
        self.position = start_position_ms

    async def play(self):
        self.calls.append(("play",))
        if not self.playing:
            self.playing = True
            await self._emit_playing(True)

    async def pause(self):
        self.calls.append(("pause",))
        if self.playing:
            self.playing = False
            await self._emit_playing(False)

    async def stop(self):
        self.calls.append(("stop",))
        self.playing = False
        self.position = 0
        for listener in list(self.listeners):
            await listener.on_playing_changed(False)
            await listener.on_phase_changed(PlaybackPhase.STOPPED)

    async def seek(self, position_ms):
        self.calls.append(("seek", position_ms))
        self.position = position_ms

    async def next(self):
        self.calls.append(("next",))
        if self.has_next():
            self.index += 1
            self.position = 0
            await self.emit_transition(self.queue[self.index].id)

    async def previous(self):
        self.calls.append(("previous",))
        if self.has_previous():
            self.index -= 1
            self.position = 0
            await self.emit_transition(self.queue[self.index].id)

    async def set_shuffle(self, enabled):
        self.calls.append(("set_shuffle", enabled))
        self.shuffle = enabled

    async def set_repeat_one(self, enabled):
        self.calls.append(("set_repeat_one", enabled))
        self.repeat_one = enabled

    async def release(self):
        self.calls.append(("release",))
        self.released = True
        self.playing = False

    def has_next(self):
        return self.index + 1 < len(self.queue)

    def has_previous(self):
        return self.index > 0

    def is_playing(self):
        return self.playing

    def position_ms(self):
        return self.position

    def duration_ms(self):
        if 0 <= self.index < len(self.queue):
            return self.queue[self.index].duration_ms
        return 0

    def add_listener(self, listener):
        if listener not in self.listeners:
            self.listeners.append(listener)

    def remove_listener(self, listener):
        if listener in self.listeners:
            self.listeners.remove(listener)


# ============================================================================
# Event Bus Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_event_bus():
    """Drop handlers registered on the global event bus by a test."""
    from local_music_player.domain.shared.events import reset_event_bus

    reset_event_bus()
    yield
    reset_event_bus()


# ============================================================================
# Database and Store Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from local_music_player.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def sqlite_store(in_memory_database):
    """Create a SQLite key-value store on the in-memory database."""
    from local_music_player.infrastructure.persistence.repositories.document_store import (
        SQLiteKeyValueStore,
    )

    return SQLiteKeyValueStore(in_memory_database)


@pytest.fixture
def memory_store():
    """Create an empty in-memory key-value store."""
    from local_music_player.infrastructure.persistence.repositories.document_store import (
        InMemoryKeyValueStore,
    )

    return InMemoryKeyValueStore()


@pytest.fixture
def playlist_repository(memory_store):
    """Create a playlist repository on the in-memory store."""
    from local_music_player.infrastructure.persistence.repositories.playlist_repository import (
        KeyValuePlaylistRepository,
    )

    return KeyValuePlaylistRepository(memory_store)


def stored_text(store, key: str) -> str | None:
    """Serialized JSON an in-memory store holds under ``key``."""
    return store._documents.get(key)


async def put_raw_document(database, key: str, text: str) -> None:
    """Write ``text`` into the documents table without JSON encoding."""
    await database.execute(
        "INSERT OR REPLACE INTO kv_documents (key, value) VALUES (?, ?)", (key, text)
    )


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_track(song_id: int, **overrides) -> Track:
    """Build a track with predictable defaults derived from ``song_id``."""
    fields = {
        "id": song_id,
        "title": f"Song {song_id}",
        "artist": "Artist A",
        "album": "Album A",
        "genre": "Rock",
        "track_number": song_id,
        "year": 2000,
        "duration_ms": 180_000 + song_id * 1000,
        "uri": f"file:///music/song_{song_id}.mp3",
        "date_added": 1_700_000_000 + song_id,
    }
    fields.update(overrides)
    return Track(**fields)


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    return make_track(1, title="Test Track", artist="Test Artist", album="Test Album")


@pytest.fixture
def sample_tracks():
    """Ten tracks, ids 1..10, in a fixed original order."""
    return [make_track(i) for i in range(1, 11)]


@pytest.fixture
def library_tracks():
    """A small library spanning several artists, albums, genres and years."""
    return [
        make_track(1, title="Blue", artist="Miles", album="Kind", genre="Jazz", track_number=2, year=1959),
        make_track(2, title="So What", artist="Miles", album="Kind", genre="Jazz", track_number=1, year=1959),
        make_track(3, title="Solar", artist="Miles", album="Walkin", genre="Jazz", track_number=1, year=1954),
        make_track(4, title="Airbag", artist="Radiohead", album="OK", genre="Rock", track_number=1, year=1997),
        make_track(5, title="Karma", artist="Radiohead", album="OK", genre="Rock", track_number=6, year=1997),
        make_track(6, title="Greatest", artist="Other", album="Kind", genre="Rock", track_number=1, year=2001),
        make_track(7, title="", artist="", album="", genre="", track_number=0, year=0),
    ]


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def fake_engine():
    """Create a recording fake playback engine."""
    return FakePlaybackEngine()


@pytest.fixture
def coordinator(fake_engine, playlist_repository):
    """Create a playback coordinator wired to the fake engine."""
    import random

    from local_music_player.application.services.playback_coordinator import (
        PlaybackCoordinator,
    )

    return PlaybackCoordinator(
        engine=fake_engine,
        playlist_repository=playlist_repository,
        rng=random.Random(1234),
    )
