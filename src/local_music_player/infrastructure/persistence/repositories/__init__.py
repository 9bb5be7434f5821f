"""Repository implementations backed by key-value document stores."""

from .document_store import InMemoryKeyValueStore, SQLiteKeyValueStore
from .playlist_repository import KeyValuePlaylistRepository

__all__ = [
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "KeyValuePlaylistRepository",
]
