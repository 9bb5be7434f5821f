# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, exceptions and the event bus
- music/: Track, playlist, playback state and library grouping logic
"""

from local_music_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
