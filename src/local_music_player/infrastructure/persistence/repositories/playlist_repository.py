"""Playlist, favorites and recently-played persistence on a key-value store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from local_music_player.domain.music.entities import Playlist
from local_music_player.domain.music.repository import PlaylistRepository
from local_music_player.domain.shared.constants import PlaylistConstants, StorageKeys
from local_music_player.domain.shared.datetime_utils import UtcDateTime
from local_music_player.domain.shared.events import PlaylistDeleted, PlaylistSaved, get_event_bus
from local_music_player.domain.shared.messages import LogTemplates
from local_music_player.domain.shared.types import is_song_id

if TYPE_CHECKING:
    from local_music_player.domain.music.repository import KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_ID = PlaylistConstants.FAVORITES_PLAYLIST_ID


def _accepts(song_id: Any) -> bool:
    if is_song_id(song_id):
        return True
    logger.warning(LogTemplates.SONG_ID_REJECTED, song_id)
    return False


class KeyValuePlaylistRepository(PlaylistRepository):
    """Persists playlists as whole JSON documents.

    Layout:
    - ``saved_playlists``: list of playlist documents, favorites excluded
    - ``favorites_songs``: list of song ids backing the Favorites playlist
    - ``recently_played_songs``: list of song ids, most recent first
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_recently_played: int = PlaylistConstants.MAX_RECENTLY_PLAYED,
    ) -> None:
        self._store = store
        self._max_recently_played = max_recently_played

    # ---- Playlists ----

    async def get_all_playlists(self) -> list[Playlist]:
        return [*await self._load_user_playlists(), await self.get_favorites_playlist()]

    async def get_playlist_by_id(self, playlist_id: str) -> Playlist | None:
        if playlist_id == FAVORITES_ID:
            return await self.get_favorites_playlist()
        for playlist in await self._load_user_playlists():
            if playlist.id == playlist_id:
                return playlist
        return None

    async def save_playlist(self, playlist: Playlist) -> bool:
        if playlist.is_favorites:
            return await self._save_song_ids(StorageKeys.FAVORITES_SONGS, playlist.song_ids)

        others = [p for p in await self._load_user_playlists() if p.id != playlist.id]
        saved = await self._save_user_playlists([*others, playlist])
        if saved:
            logger.debug(LogTemplates.PLAYLIST_SAVED, playlist.name, playlist.id)
            await get_event_bus().publish(
                PlaylistSaved(playlist_id=playlist.id, song_count=playlist.song_count)
            )
        return saved

    async def delete_playlist(self, playlist_id: str) -> bool:
        if playlist_id == FAVORITES_ID:
            logger.warning(LogTemplates.PLAYLIST_FAVORITES_DELETE_REJECTED)
            return False

        remaining = [p for p in await self._load_user_playlists() if p.id != playlist_id]
        deleted = await self._save_user_playlists(remaining)
        if deleted:
            logger.info(LogTemplates.PLAYLIST_DELETED, playlist_id)
            await get_event_bus().publish(PlaylistDeleted(playlist_id=playlist_id))
        return deleted

    async def create_playlist(self, name: str, description: str = "") -> Playlist:
        playlist = Playlist(name=name, description=description)
        await self.save_playlist(playlist)
        return playlist

    async def add_song_to_playlist(self, playlist_id: str, song_id: int) -> bool:
        if not _accepts(song_id):
            return False
        if playlist_id == FAVORITES_ID:
            return await self.add_to_favorites(song_id)
        return await self._update_playlist(playlist_id, lambda p: p.add_song(song_id))

    async def remove_song_from_playlist(self, playlist_id: str, song_id: int) -> bool:
        if playlist_id == FAVORITES_ID:
            return await self.remove_from_favorites(song_id)
        return await self._update_playlist(playlist_id, lambda p: p.remove_song(song_id))

    async def move_song_in_playlist(self, playlist_id: str, from_index: int, to_index: int) -> bool:
        return await self._update_playlist(
            playlist_id, lambda p: p.move_song(from_index, to_index)
        )

    async def _update_playlist(
        self, playlist_id: str, change: Callable[[Playlist], Playlist]
    ) -> bool:
        playlist = await self.get_playlist_by_id(playlist_id)
        if playlist is None:
            logger.debug(LogTemplates.PLAYLIST_NOT_FOUND, playlist_id)
            return False
        updated = change(playlist)
        if updated is playlist:
            return True
        return await self.save_playlist(updated)

    # ---- Favorites ----

    async def get_favorites_playlist(self) -> Playlist:
        return Playlist.favorites(await self._load_song_ids(StorageKeys.FAVORITES_SONGS))

    async def add_to_favorites(self, song_id: int) -> bool:
        if not _accepts(song_id):
            return False
        favorites = await self.get_favorites_playlist()
        if favorites.contains_song(song_id):
            return True
        return await self.save_playlist(favorites.add_song(song_id))

    async def remove_from_favorites(self, song_id: int) -> bool:
        favorites = await self.get_favorites_playlist()
        if not favorites.contains_song(song_id):
            return True
        return await self.save_playlist(favorites.remove_song(song_id))

    async def toggle_favorite(self, song_id: int) -> bool:
        # A failed write leaves membership, and so the result, unchanged.
        if await self.is_favorite(song_id):
            return not await self.remove_from_favorites(song_id)
        return await self.add_to_favorites(song_id)

    async def is_favorite(self, song_id: int) -> bool:
        return song_id in await self._load_song_ids(StorageKeys.FAVORITES_SONGS)

    # ---- Recently played ----

    async def add_to_recently_played(self, song_id: int) -> bool:
        if not _accepts(song_id):
            return False
        history = [s for s in await self.get_recently_played_song_ids() if s != song_id]
        history.insert(0, song_id)
        saved = await self._save_song_ids(
            StorageKeys.RECENTLY_PLAYED_SONGS, history[: self._max_recently_played]
        )
        if saved:
            logger.debug(LogTemplates.RECENTLY_PLAYED_RECORDED, song_id)
        return saved

    async def get_recently_played_song_ids(self) -> list[int]:
        return await self._load_song_ids(StorageKeys.RECENTLY_PLAYED_SONGS)

    # ---- Document mapping ----

    async def _load_song_ids(self, key: str) -> list[int]:
        document = await self._store.load(key)
        if document is None:
            return []
        if not isinstance(document, list) or not all(is_song_id(s) for s in document):
            logger.warning(LogTemplates.SONG_IDS_UNREADABLE, key)
            return []
        return list(dict.fromkeys(document))

    async def _save_song_ids(self, key: str, song_ids: Any) -> bool:
        return await self._store.save(key, list(song_ids))

    async def _load_user_playlists(self) -> list[Playlist]:
        document = await self._store.load(StorageKeys.SAVED_PLAYLISTS)
        if document is None:
            return []
        if not isinstance(document, list):
            logger.warning(LogTemplates.PLAYLISTS_UNREADABLE)
            return []

        playlists = []
        for entry in document:
            playlist = self._document_to_playlist(entry)
            if playlist is None:
                logger.warning(LogTemplates.PLAYLIST_ENTRY_SKIPPED, entry)
            elif not playlist.is_favorites:
                playlists.append(playlist)
        return playlists

    async def _save_user_playlists(self, playlists: list[Playlist]) -> bool:
        return await self._store.save(
            StorageKeys.SAVED_PLAYLISTS,
            [self._playlist_to_document(p) for p in playlists if not p.is_favorites],
        )

    @staticmethod
    def _playlist_to_document(playlist: Playlist) -> dict[str, Any]:
        return {
            "id": playlist.id,
            "name": playlist.name,
            "description": playlist.description,
            "songIds": list(playlist.song_ids),
            "dateCreated": UtcDateTime(playlist.date_created).unix_millis,
            "dateModified": UtcDateTime(playlist.date_modified).unix_millis,
            "coverArtUri": playlist.cover_art_uri,
        }

    @staticmethod
    def _document_to_playlist(document: Any) -> Playlist | None:
        if not isinstance(document, dict):
            return None
        try:
            now = UtcDateTime.now()
            return Playlist(
                id=document["id"],
                name=document["name"],
                description=document.get("description", ""),
                song_ids=tuple(document.get("songIds", ())),
                date_created=UtcDateTime.from_unix_millis(
                    document.get("dateCreated", now.unix_millis)
                ).dt,
                date_modified=UtcDateTime.from_unix_millis(
                    document.get("dateModified", now.unix_millis)
                ).dt,
                cover_art_uri=document.get("coverArtUri"),
            )
        except (KeyError, TypeError, ValueError, OverflowError, ValidationError):
            return None
