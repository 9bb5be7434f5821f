"""Audio infrastructure - ffplay subprocess playback engine."""

from local_music_player.infrastructure.audio.ffplay_engine import (
    FfplayConfig,
    FfplayPlaybackEngine,
    playable_location,
)

__all__ = [
    "FfplayConfig",
    "FfplayPlaybackEngine",
    "playable_location",
]
