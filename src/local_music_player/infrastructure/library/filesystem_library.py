"""Filesystem-backed media library that reads tags with mutagen."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import mimetypes
import os
from pathlib import Path

import mutagen
from mutagen import MutagenError

from ...application.interfaces.media_library import MediaLibrary
from ...config.settings import LibrarySettings
from ...domain.music.entities import Track
from ...domain.music.services import LibraryDomainService
from ...domain.shared.constants import AudioConstants
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

# Ids are kept within 60 bits so they stay well inside SongId's signed 64-bit range.
_ID_HEX_DIGITS = 15


def stable_track_id(path: Path) -> int:
    """Stable id derived from the resolved file path."""
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()
    return int(digest[:_ID_HEX_DIGITS], 16)


def _first_tag(tags: dict[str, list[str]] | None, name: str) -> str:
    if not tags:
        return ""
    values = tags.get(name) or []
    return str(values[0]).strip() if values else ""


def _leading_int(value: str) -> int:
    """Parse "3/12" or "1999-05-01" style tag values."""
    digits = ""
    for char in value.strip():
        if not char.isdigit():
            break
        digits += char
    return int(digits) if digits else 0


class FilesystemMediaLibrary(MediaLibrary):
    """Indexes audio files under a music directory.

    Scans run in a worker thread; the last scan result is cached for search.
    """

    def __init__(self, settings: LibrarySettings | None = None) -> None:
        self._settings = settings or LibrarySettings()
        self._root = Path(self._settings.music_dir).expanduser()
        self._extensions = frozenset(self._settings.extensions)
        self._tracks: list[Track] = []

    @property
    def root(self) -> Path:
        return self._root

    async def scan(self) -> list[Track]:
        logger.info(LogTemplates.LIBRARY_SCAN_STARTED, self._root)
        tracks = await asyncio.to_thread(self._scan_directory)
        self._tracks = tracks
        logger.info(LogTemplates.LIBRARY_SCAN_COMPLETED, len(tracks))
        return list(tracks)

    async def search(self, query: str) -> list[Track]:
        if not self._tracks:
            await self.scan()
        return [t for t in self._tracks if LibraryDomainService.matches_query(t, query)]

    def _scan_directory(self) -> list[Track]:
        if not self._root.is_dir():
            logger.warning(LogTemplates.LIBRARY_DIR_MISSING, self._root)
            return []

        tracks: list[Track] = []
        for dirpath, _dirnames, filenames in os.walk(self._root):
            for filename in filenames:
                path = Path(dirpath) / filename
                if path.suffix.lower() not in self._extensions:
                    continue
                try:
                    tracks.append(self._build_track(path))
                except OSError as e:
                    logger.warning(LogTemplates.LIBRARY_FILE_SKIPPED, path, e)

        tracks.sort(key=lambda t: t.display_title.casefold())
        return tracks

    def _build_track(self, path: Path) -> Track:
        resolved = path.resolve()
        stat = resolved.stat()

        tags: dict[str, list[str]] | None = None
        duration_ms = 0
        mime_type = mimetypes.guess_type(resolved.name)[0] or ""
        try:
            audio = mutagen.File(resolved, easy=True)
        except MutagenError as e:
            logger.warning(LogTemplates.LIBRARY_TAGS_UNREADABLE, resolved, e)
            audio = None

        if audio is not None:
            tags = dict(audio.tags or {})
            length = getattr(audio.info, "length", 0) or 0
            duration_ms = int(length * 1000)
            if getattr(audio, "mime", None):
                mime_type = audio.mime[0]

        return Track(
            id=stable_track_id(resolved),
            title=_first_tag(tags, "title") or resolved.stem,
            artist=_first_tag(tags, "artist"),
            album=_first_tag(tags, "album"),
            genre=_first_tag(tags, "genre"),
            track_number=_leading_int(_first_tag(tags, "tracknumber")),
            year=_leading_int(_first_tag(tags, "date")),
            duration_ms=duration_ms,
            uri=resolved.as_uri(),
            album_art_uri=self._find_album_art(resolved.parent),
            date_added=int(stat.st_mtime),
            size=stat.st_size,
            mime_type=mime_type,
        )

    @staticmethod
    def _find_album_art(directory: Path) -> str | None:
        for name in AudioConstants.ALBUM_ART_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate.as_uri()
        return None
