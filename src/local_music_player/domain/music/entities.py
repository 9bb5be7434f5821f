"""Core domain entities for the music bounded context."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from local_music_player.domain.music.value_objects import BrowseCategory, PlaybackPhase
from local_music_player.domain.shared.constants import DisplayDefaults, PlaylistConstants
from local_music_player.domain.shared.datetime_utils import (
    format_millis,
    format_millis_long,
    utcnow,
)
from local_music_player.domain.shared.messages import ErrorMessages
from local_music_player.domain.shared.types import (
    DurationMs,
    EpochSeconds,
    FileBytes,
    NonEmptyStr,
    NonNegativeInt,
    SongId,
    UtcDatetimeField,
)


def _or_default(value: str, default: str) -> str:
    return value if value.strip() else default


class Track(BaseModel):
    """Immutable value object representing one playable audio item."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: SongId
    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    track_number: NonNegativeInt = 0
    year: NonNegativeInt = 0
    duration_ms: DurationMs = 0
    uri: NonEmptyStr
    album_art_uri: str | None = None
    date_added: EpochSeconds = 0
    size: FileBytes = 0
    mime_type: str = ""

    @property
    def display_title(self) -> str:
        return _or_default(self.title, DisplayDefaults.UNKNOWN_TITLE)

    @property
    def display_artist(self) -> str:
        return _or_default(self.artist, DisplayDefaults.UNKNOWN_ARTIST)

    @property
    def display_album(self) -> str:
        return _or_default(self.album, DisplayDefaults.UNKNOWN_ALBUM)

    @property
    def display_genre(self) -> str:
        return _or_default(self.genre, DisplayDefaults.UNKNOWN_GENRE)

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS."""
        return format_millis(self.duration_ms)


class Playlist(BaseModel):
    """User playlist holding an ordered, duplicate-free list of song ids.

    Mutating operations return a new playlist. Operations that would not change
    the song list return ``self`` so ``date_modified`` only moves on a real change.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: str = ""
    song_ids: tuple[SongId, ...] = ()
    date_created: UtcDatetimeField = Field(default_factory=utcnow)
    date_modified: UtcDatetimeField = Field(default_factory=utcnow)
    cover_art_uri: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _dedupe_song_ids(cls, data: Any) -> Any:
        if isinstance(data, dict) and "song_ids" in data:
            data = {**data, "song_ids": tuple(dict.fromkeys(data["song_ids"]))}
        return data

    @property
    def is_favorites(self) -> bool:
        return self.id == PlaylistConstants.FAVORITES_PLAYLIST_ID

    @property
    def song_count(self) -> int:
        return len(self.song_ids)

    def contains_song(self, song_id: int) -> bool:
        return song_id in self.song_ids

    def formatted_duration(self, tracks: Iterable[Track]) -> str:
        """Total duration of the member tracks found in ``tracks``."""
        members = set(self.song_ids)
        total = sum(t.duration_ms for t in tracks if t.id in members)
        return format_millis_long(total)

    def _with_song_ids(self, song_ids: Sequence[int]) -> Playlist:
        return Playlist(**{**dict(self), "song_ids": tuple(song_ids), "date_modified": utcnow()})

    def add_song(self, song_id: int) -> Playlist:
        if song_id in self.song_ids:
            return self
        return self._with_song_ids((*self.song_ids, song_id))

    def remove_song(self, song_id: int) -> Playlist:
        if song_id not in self.song_ids:
            return self
        return self._with_song_ids([s for s in self.song_ids if s != song_id])

    def move_song(self, from_index: int, to_index: int) -> Playlist:
        """Move the song at ``from_index`` to ``to_index``; out-of-range is a no-op."""
        size = len(self.song_ids)
        if not (0 <= from_index < size and 0 <= to_index < size):
            return self
        if from_index == to_index:
            return self

        song_ids = list(self.song_ids)
        song_id = song_ids.pop(from_index)
        song_ids.insert(to_index, song_id)
        return self._with_song_ids(song_ids)

    @classmethod
    def favorites(cls, song_ids: Sequence[int] = ()) -> Playlist:
        """Build the synthetic Favorites playlist."""
        return cls(
            id=PlaylistConstants.FAVORITES_PLAYLIST_ID,
            name=PlaylistConstants.FAVORITES_NAME,
            description=PlaylistConstants.FAVORITES_DESCRIPTION,
            song_ids=tuple(song_ids),
        )


class PlaylistContext(BaseModel):
    """The browsing scope that produced the active queue.

    ``original_order`` is the restoration point when shuffle is turned off;
    the model is frozen and holds tuples so it cannot change after creation.
    """

    model_config = ConfigDict(frozen=True)

    category: BrowseCategory
    item_id: str | None = None
    item_name: str | None = None
    all_songs: tuple[Track, ...]
    original_order: tuple[Track, ...]

    @classmethod
    def of(
        cls,
        category: BrowseCategory,
        tracks: Sequence[Track],
        *,
        item_id: str | None = None,
        item_name: str | None = None,
    ) -> PlaylistContext:
        songs = tuple(tracks)
        return cls(
            category=category,
            item_id=item_id,
            item_name=item_name,
            all_songs=songs,
            original_order=songs,
        )

    @classmethod
    def all_songs_of(cls, tracks: Sequence[Track]) -> PlaylistContext:
        """Default context used when a playlist is started without one."""
        return cls.of(
            BrowseCategory.ALL_SONGS, tracks, item_name=PlaylistConstants.ALL_SONGS_NAME
        )


class PlayerState(BaseModel):
    """Published snapshot of the player. Replaced wholesale on every change."""

    model_config = ConfigDict(frozen=True)

    phase: PlaybackPhase = PlaybackPhase.STOPPED
    current_track: Track | None = None
    position_ms: DurationMs = 0
    duration_ms: DurationMs = 0
    shuffle_enabled: bool = False
    repeat_enabled: bool = False

    @model_validator(mode="after")
    def _modes_are_exclusive(self) -> PlayerState:
        if self.shuffle_enabled and self.repeat_enabled:
            raise ValueError(ErrorMessages.SHUFFLE_AND_REPEAT_EXCLUSIVE)
        return self

    def evolve(self, **changes: Any) -> PlayerState:
        """Return a validated copy with ``changes`` applied."""
        return PlayerState(**{**dict(self), **changes})

    @property
    def is_playing(self) -> bool:
        return self.phase.is_playing

    @property
    def progress(self) -> float:
        """Playback progress in [0.0, 1.0]."""
        if self.duration_ms <= 0:
            return 0.0
        return min(1.0, max(0.0, self.position_ms / self.duration_ms))

    @property
    def formatted_position(self) -> str:
        return format_millis(self.position_ms)

    @property
    def formatted_duration(self) -> str:
        return format_millis(self.duration_ms)


class CategoryItem(BaseModel):
    """One browsable grouping (an artist, album, genre, or year)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    song_count: NonNegativeInt
    category: BrowseCategory
    description: str = ""
    image_uri: str | None = None

    @property
    def song_count_text(self) -> str:
        return f"{self.song_count} song{'' if self.song_count == 1 else 's'}"


class ArtistGroup(BaseModel):
    """An artist with their albums, as shown in the grouped album view."""

    model_config = ConfigDict(frozen=True)

    artist_name: str
    albums: tuple[CategoryItem, ...] = ()
    total_songs: NonNegativeInt = 0
    is_expanded: bool = False

    @property
    def album_count_text(self) -> str:
        albums = len(self.albums)
        return (
            f"{albums} album{'' if albums == 1 else 's'}, "
            f"{self.total_songs} song{'' if self.total_songs == 1 else 's'}"
        )
