"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for data persistence.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Any

from local_music_player.domain.music.entities import Playlist


class KeyValueStore(ABC):
    """Document store addressed by string keys.

    Every write replaces the whole document stored under a key, so concurrent
    writers resolve as last-write-wins.
    """

    @abstractmethod
    async def load(self, key: str) -> Any | None:
        """Load the JSON document stored under a key.

        Args:
            key: The document key.

        Returns:
            The decoded document, or None when the key is missing or the
            stored value cannot be decoded.
        """
        ...

    @abstractmethod
    async def save(self, key: str, document: Any) -> bool:
        """Replace the document stored under a key.

        Args:
            key: The document key.
            document: A JSON-serialisable value.

        Returns:
            True if the write succeeded.
        """
        ...


class PlaylistRepository(ABC):
    """Abstract repository for playlists, favorites and play history.

    The Favorites playlist is synthetic: it is assembled from its own song id
    list and is never stored with, or deletable like, user playlists.
    """

    @abstractmethod
    async def get_all_playlists(self) -> list[Playlist]:
        """Get all user playlists followed by the Favorites playlist."""
        ...

    @abstractmethod
    async def get_playlist_by_id(self, playlist_id: str) -> Playlist | None:
        """Retrieve a playlist by ID.

        Args:
            playlist_id: The playlist ID, possibly the favorites ID.

        Returns:
            The playlist if found, None otherwise.
        """
        ...

    @abstractmethod
    async def save_playlist(self, playlist: Playlist) -> bool:
        """Insert or replace a user playlist.

        Returns:
            True if the write succeeded.
        """
        ...

    @abstractmethod
    async def delete_playlist(self, playlist_id: str) -> bool:
        """Delete a user playlist.

        Returns:
            False for the favorites playlist or a failed write, True otherwise.
        """
        ...

    @abstractmethod
    async def create_playlist(self, name: str, description: str = "") -> Playlist:
        """Create and persist an empty playlist."""
        ...

    @abstractmethod
    async def add_song_to_playlist(self, playlist_id: str, song_id: int) -> bool:
        ...

    @abstractmethod
    async def remove_song_from_playlist(self, playlist_id: str, song_id: int) -> bool:
        ...

    @abstractmethod
    async def move_song_in_playlist(self, playlist_id: str, from_index: int, to_index: int) -> bool:
        ...

    @abstractmethod
    async def get_favorites_playlist(self) -> Playlist:
        ...

    @abstractmethod
    async def add_to_favorites(self, song_id: int) -> bool:
        ...

    @abstractmethod
    async def remove_from_favorites(self, song_id: int) -> bool:
        ...

    @abstractmethod
    async def toggle_favorite(self, song_id: int) -> bool:
        """Flip favorite membership of a song.

        Returns:
            True if the song is a favorite afterwards.
        """
        ...

    @abstractmethod
    async def is_favorite(self, song_id: int) -> bool:
        ...

    @abstractmethod
    async def add_to_recently_played(self, song_id: int) -> bool:
        """Move a song to the front of the bounded recently-played history."""
        ...

    @abstractmethod
    async def get_recently_played_song_ids(self) -> list[int]:
        """Get recently played song IDs, most recent first."""
        ...
