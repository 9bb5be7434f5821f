"""
Music Bounded Context

Domain logic for tracks, playlists, playback state and library grouping.
"""

from local_music_player.domain.music.entities import (
    ArtistGroup,
    CategoryItem,
    PlayerState,
    Playlist,
    PlaylistContext,
    Track,
)
from local_music_player.domain.music.repository import KeyValueStore, PlaylistRepository
from local_music_player.domain.music.services import LibraryDomainService, shuffle_playlist
from local_music_player.domain.music.value_objects import BrowseCategory, PlaybackPhase

__all__ = [
    # Entities
    "Track",
    "Playlist",
    "PlaylistContext",
    "PlayerState",
    "CategoryItem",
    "ArtistGroup",
    # Value Objects
    "BrowseCategory",
    "PlaybackPhase",
    # Repository
    "KeyValueStore",
    "PlaylistRepository",
    # Services
    "LibraryDomainService",
    "shuffle_playlist",
]
