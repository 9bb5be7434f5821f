"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from local_music_player.application.interfaces.media_library import MediaLibrary
from local_music_player.application.interfaces.playback_engine import (
    PlaybackEngine,
    PlaybackEngineListener,
)

__all__ = [
    "MediaLibrary",
    "PlaybackEngine",
    "PlaybackEngineListener",
]
