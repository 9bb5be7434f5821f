"""Media library infrastructure - filesystem scanning."""

from local_music_player.infrastructure.library.filesystem_library import (
    FilesystemMediaLibrary,
    stable_track_id,
)

__all__ = ["FilesystemMediaLibrary", "stable_track_id"]
