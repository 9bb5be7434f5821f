"""Centralized constants for storage keys, database schema, and other shared values."""

from __future__ import annotations


class StorageKeys:
    """Keys of the persisted JSON documents."""

    SAVED_PLAYLISTS = "saved_playlists"
    FAVORITES_SONGS = "favorites_songs"
    RECENTLY_PLAYED_SONGS = "recently_played_songs"


class PlaylistConstants:
    """Reserved playlist values."""

    FAVORITES_PLAYLIST_ID = "favorites_playlist"
    FAVORITES_NAME = "Favorites"
    FAVORITES_DESCRIPTION = "Your favorite songs"
    MAX_RECENTLY_PLAYED = 100
    ALL_SONGS_NAME = "All Songs"


class DisplayDefaults:
    """Fallbacks used when a track field is blank."""

    UNKNOWN_TITLE = "Unknown Title"
    UNKNOWN_ARTIST = "Unknown Artist"
    UNKNOWN_ALBUM = "Unknown Album"
    UNKNOWN_GENRE = "Unknown Genre"


class DatabaseTables:
    """Database table names."""

    KV_DOCUMENTS = "kv_documents"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class AudioConstants:
    """Audio file and engine constants."""

    SUPPORTED_EXTENSIONS = (".mp3", ".flac", ".m4a", ".ogg", ".opus", ".wav", ".aac")
    ALBUM_ART_FILENAMES = ("cover.jpg", "folder.jpg", "cover.png", "folder.png")
    FFPLAY_BASE_ARGS = ("-nodisp", "-autoexit", "-loglevel", "quiet")
    # ffplay is SIGTERMed on stop; give it this long before SIGKILL.
    PROCESS_TERMINATE_TIMEOUT_S = 2.0


class CategoryKeys:
    """Separator for composite category item ids ("artist|album", "genre|year")."""

    SEPARATOR = "|"
