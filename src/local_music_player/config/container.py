"""Wires the player together.

Each component is built on first access from the nested settings and cached
on the container, so a CLI command only pays for what it touches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.media_library import MediaLibrary
    from ..application.interfaces.playback_engine import PlaybackEngine
    from ..application.services.library_service import LibraryApplicationService
    from ..application.services.playback_coordinator import PlaybackCoordinator
    from ..domain.music.repository import KeyValueStore, PlaylistRepository
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Lazily built object graph for one player process.

    Components are lazily initialized when first accessed; tests can inject
    replacements (for example a fake engine) through the constructor.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _document_store: KeyValueStore | None = None
    _playlist_repository: PlaylistRepository | None = None

    # Adapters
    _media_library: MediaLibrary | None = None
    _playback_engine: PlaybackEngine | None = None

    # Services
    _playback_coordinator: PlaybackCoordinator | None = None
    _library_service: LibraryApplicationService | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """aiosqlite database behind the document store."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def document_store(self) -> KeyValueStore:
        """JSON documents keyed by name, stored in SQLite."""
        if self._document_store is None:
            from ..infrastructure.persistence.repositories.document_store import (
                SQLiteKeyValueStore,
            )

            self._document_store = SQLiteKeyValueStore(self.database)
        return self._document_store

    @property
    def playlist_repository(self) -> PlaylistRepository:
        """Playlist storage on top of the document store."""
        if self._playlist_repository is None:
            from ..infrastructure.persistence.repositories.playlist_repository import (
                KeyValuePlaylistRepository,
            )

            self._playlist_repository = KeyValuePlaylistRepository(
                self.document_store,
                max_recently_played=self.settings.playback.max_recently_played,
            )
        return self._playlist_repository

    # === Library and Audio ===

    @property
    def media_library(self) -> MediaLibrary:
        """Filesystem scanner for the configured music directory."""
        if self._media_library is None:
            from ..infrastructure.library.filesystem_library import FilesystemMediaLibrary

            self._media_library = FilesystemMediaLibrary(self.settings.library)
        return self._media_library

    @property
    def playback_engine(self) -> PlaybackEngine:
        """ffplay-backed engine."""
        if self._playback_engine is None:
            from ..infrastructure.audio.ffplay_engine import FfplayPlaybackEngine

            self._playback_engine = FfplayPlaybackEngine(self.settings.playback)
        return self._playback_engine

    # === Services ===

    @property
    def playback_coordinator(self) -> PlaybackCoordinator:
        """Session coordinator, registered as the engine's listener on creation."""
        if self._playback_coordinator is None:
            from ..application.services.playback_coordinator import PlaybackCoordinator

            self._playback_coordinator = PlaybackCoordinator(
                engine=self.playback_engine,
                playlist_repository=self.playlist_repository,
                settings=self.settings.playback,
            )
        return self._playback_coordinator

    @property
    def library_service(self) -> LibraryApplicationService:
        if self._library_service is None:
            from ..application.services.library_service import LibraryApplicationService

            self._library_service = LibraryApplicationService(
                media_library=self.media_library,
                playlist_repository=self.playlist_repository,
            )
        return self._library_service

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Create the database schema."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Release playback resources, then close the database."""
        if self._playback_coordinator is not None:
            await self._playback_coordinator.close()
        elif self._playback_engine is not None:
            await self._playback_engine.release()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Return a container with nothing built yet."""
    return Container(settings)
