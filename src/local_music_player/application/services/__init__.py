"""Application services for playback coordination and library browsing."""

from local_music_player.application.services.library_service import (
    LibraryApplicationService,
    LibraryCategories,
)
from local_music_player.application.services.playback_coordinator import PlaybackCoordinator

__all__ = [
    "LibraryApplicationService",
    "LibraryCategories",
    "PlaybackCoordinator",
]
