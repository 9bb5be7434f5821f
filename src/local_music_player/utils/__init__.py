"""Shared utilities."""

from local_music_player.utils.logging import ColoredFormatter, setup_logging

__all__ = ["ColoredFormatter", "setup_logging"]
