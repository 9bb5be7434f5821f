"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite key-value documents, playlist repository)
- Library (filesystem scanner with mutagen tag reading)
- Audio (ffplay subprocess engine)
"""

from local_music_player.infrastructure.audio.ffplay_engine import FfplayPlaybackEngine
from local_music_player.infrastructure.library.filesystem_library import FilesystemMediaLibrary
from local_music_player.infrastructure.persistence.database import Database

__all__ = [
    "Database",
    "FfplayPlaybackEngine",
    "FilesystemMediaLibrary",
]
