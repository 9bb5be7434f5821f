"""Application configuration and dependency wiring."""

from local_music_player.config.settings import Settings, clear_settings_cache, get_settings

__all__ = ["Settings", "clear_settings_cache", "get_settings"]
