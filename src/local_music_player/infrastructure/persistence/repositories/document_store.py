"""Key-value document stores backing playlists, favorites and history."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from local_music_player.domain.music.repository import KeyValueStore
from local_music_player.domain.shared.constants import DatabaseTables
from local_music_player.domain.shared.datetime_utils import UtcDateTime
from local_music_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


def _decode(key: str, raw: str | None) -> Any | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning(LogTemplates.STORE_DOCUMENT_MALFORMED, key)
        return None


class SQLiteKeyValueStore(KeyValueStore):
    """Stores each document as a JSON string row in SQLite.

    aiosqlite runs every statement on its own worker thread, so reads and
    writes never block the event loop.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    async def load(self, key: str) -> Any | None:
        try:
            row = await self._db.fetch_one(
                f"SELECT value FROM {DatabaseTables.KV_DOCUMENTS} WHERE key = ?",
                (key,),
            )
        except Exception:
            logger.exception(LogTemplates.STORE_READ_FAILED, key)
            return None
        return _decode(key, row["value"] if row else None)

    async def save(self, key: str, document: Any) -> bool:
        try:
            payload = json.dumps(document)
            await self._db.execute(
                f"""
                INSERT INTO {DatabaseTables.KV_DOCUMENTS} (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, payload, UtcDateTime.now().iso),
            )
        except Exception:
            logger.exception(LogTemplates.STORE_WRITE_FAILED, key)
            return False

        logger.debug(LogTemplates.STORE_DOCUMENT_SAVED, key, len(payload))
        return True


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store that keeps serialized JSON, mirroring the SQLite store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._documents: dict[str, str] = dict(initial or {})

    async def load(self, key: str) -> Any | None:
        return _decode(key, self._documents.get(key))

    async def save(self, key: str, document: Any) -> bool:
        try:
            self._documents[key] = json.dumps(document)
        except (TypeError, ValueError):
            logger.exception(LogTemplates.STORE_WRITE_FAILED, key)
            return False
        return True
