"""
Shared Domain Kernel

Contains types, exceptions, and the event bus shared across the domain.
"""

from local_music_player.domain.shared.exceptions import DomainError, InvalidOperationError

__all__ = [
    "DomainError",
    "InvalidOperationError",
]
