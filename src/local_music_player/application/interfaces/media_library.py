"""Port interface for the media index that supplies tracks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class MediaLibrary(ABC):
    """Interface for scanning and searching the audio collection."""

    @abstractmethod
    async def scan(self) -> list["Track"]:
        """Index the collection and return every track."""
        ...

    @abstractmethod
    async def search(self, query: str) -> list["Track"]:
        """Return tracks whose title, artist or album contains ``query``."""
        ...
