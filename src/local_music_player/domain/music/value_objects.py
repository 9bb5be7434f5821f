"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class PlaybackPhase(Enum):
    """Playback phase as reported by the engine.

    The engine owns the phase; the coordinator mirrors it and never
    enforces transitions, so any phase may follow any other.
    """

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    LOADING = "loading"
    ERROR = "error"

    @property
    def is_active(self) -> bool:
        return self in {PlaybackPhase.PLAYING, PlaybackPhase.PAUSED}

    @property
    def is_playing(self) -> bool:
        return self == PlaybackPhase.PLAYING


class BrowseCategory(Enum):
    """Browsing scopes a playlist context can be built from."""

    ALL_SONGS = "all_songs"
    ARTISTS = "artists"
    ALBUMS = "albums"
    GENRES = "genres"
    GENRE_YEARS = "genre_years"
    PLAYLISTS = "playlists"
    RECENTLY_ADDED = "recently_added"
    RECENTLY_PLAYED = "recently_played"
    FAVORITES = "favorites"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    BrowseCategory.ALL_SONGS: "All Songs",
    BrowseCategory.ARTISTS: "Artists",
    BrowseCategory.ALBUMS: "Albums",
    BrowseCategory.GENRES: "Genres",
    BrowseCategory.GENRE_YEARS: "Genres by Year",
    BrowseCategory.PLAYLISTS: "Playlists",
    BrowseCategory.RECENTLY_ADDED: "Recently Added",
    BrowseCategory.RECENTLY_PLAYED: "Recently Played",
    BrowseCategory.FAVORITES: "Favorites",
}
