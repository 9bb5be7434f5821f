"""Library Application Service - browsing, search and playlist song lookup."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.music.entities import ArtistGroup, CategoryItem, PlaylistContext, Track
from ...domain.music.services import LibraryDomainService
from ...domain.music.value_objects import BrowseCategory
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import PositiveInt

if TYPE_CHECKING:
    from ...domain.music.repository import PlaylistRepository
    from ..interfaces.media_library import MediaLibrary

logger = logging.getLogger(__name__)

DEFAULT_RECENTLY_ADDED_LIMIT = 50


class LibraryCategories(BaseModel):

    artists: list[CategoryItem]
    albums: list[CategoryItem]
    genres: list[CategoryItem]
    genre_years: list[CategoryItem]
    years: list[CategoryItem]


class LibraryApplicationService:
    """Keeps the scanned song list and answers browse queries over it."""

    def __init__(
        self,
        *,
        media_library: MediaLibrary,
        playlist_repository: PlaylistRepository,
    ) -> None:
        self._library = media_library
        self._playlists = playlist_repository
        self._songs: list[Track] = []
        self._by_id: dict[int, Track] = {}
        self._expanded_artists: set[str] = set()

    @property
    def songs(self) -> tuple[Track, ...]:
        return tuple(self._songs)

    async def refresh(self) -> list[Track]:
        """Rescan the media library and reload playlist metadata."""
        songs = await self._library.scan()
        self._songs = list(songs)
        self._by_id = {track.id: track for track in self._songs}

        playlists = await self._playlists.get_all_playlists()
        logger.info(LogTemplates.LIBRARY_REFRESHED, len(self._songs), len(playlists))
        return list(self._songs)

    async def search(self, query: str) -> list[Track]:
        if not query.strip():
            return list(self._songs)
        return await self._library.search(query)

    def song_by_id(self, song_id: int) -> Track | None:
        return self._by_id.get(song_id)

    def tracks_for_ids(self, song_ids: Iterable[int]) -> list[Track]:
        """Resolve ids to tracks in the given order, skipping ids no longer in the library."""
        return [self._by_id[song_id] for song_id in song_ids if song_id in self._by_id]

    # ---- Categories ----

    def categories(self) -> LibraryCategories:
        return LibraryCategories(
            artists=LibraryDomainService.artists(self._songs),
            albums=LibraryDomainService.albums(self._songs),
            genres=LibraryDomainService.genres(self._songs),
            genre_years=LibraryDomainService.genre_years(self._songs),
            years=LibraryDomainService.years(self._songs),
        )

    def artist_groups(self) -> list[ArtistGroup]:
        return [
            group.model_copy(update={"is_expanded": group.artist_name in self._expanded_artists})
            for group in LibraryDomainService.artist_groups(self._songs)
        ]

    def toggle_artist_group_expansion(self, artist_name: str) -> bool:
        """Flip the expanded flag of one artist group and return the new value."""
        if artist_name in self._expanded_artists:
            self._expanded_artists.discard(artist_name)
            return False
        self._expanded_artists.add(artist_name)
        return True

    # ---- Songs per scope ----

    async def get_category_songs(
        self, category: BrowseCategory, item_id: str | None = None
    ) -> list[Track]:
        if category == BrowseCategory.PLAYLISTS:
            return await self.get_playlist_songs(item_id) if item_id else []
        if category == BrowseCategory.FAVORITES:
            return await self.favorite_songs()
        if category == BrowseCategory.RECENTLY_PLAYED:
            return await self.recently_played_songs()
        if category == BrowseCategory.RECENTLY_ADDED:
            return self.recently_added()
        if category == BrowseCategory.ALL_SONGS:
            # Year items live under ALL_SONGS with the year as their id.
            if item_id and item_id.isdigit():
                return self.get_songs_by_year(int(item_id))
            return list(self._songs)
        if item_id is None:
            return list(self._songs)
        return LibraryDomainService.songs_for(self._songs, category, item_id)

    def get_songs_by_year(self, year: int) -> list[Track]:
        return [track for track in self._songs if track.year == year]

    async def get_playlist_songs(self, playlist_id: str) -> list[Track]:
        playlist = await self._playlists.get_playlist_by_id(playlist_id)
        if playlist is None:
            return []
        return self.tracks_for_ids(playlist.song_ids)

    async def recently_played_songs(self) -> list[Track]:
        return self.tracks_for_ids(await self._playlists.get_recently_played_song_ids())

    async def favorite_songs(self) -> list[Track]:
        favorites = await self._playlists.get_favorites_playlist()
        return self.tracks_for_ids(favorites.song_ids)

    def recently_added(self, limit: PositiveInt = DEFAULT_RECENTLY_ADDED_LIMIT) -> list[Track]:
        newest = sorted(self._songs, key=lambda track: track.date_added, reverse=True)
        return newest[:limit]

    async def build_context(
        self,
        category: BrowseCategory,
        item_id: str | None = None,
        item_name: str | None = None,
    ) -> PlaylistContext:
        """Build the context a queue started from this browse scope will restore to."""
        songs = await self.get_category_songs(category, item_id)

        if item_name is None:
            if category == BrowseCategory.PLAYLISTS and item_id:
                playlist = await self._playlists.get_playlist_by_id(item_id)
                item_name = playlist.name if playlist else None
            else:
                item_name = item_id or category.display_name

        return PlaylistContext.of(category, songs, item_id=item_id, item_name=item_name)
