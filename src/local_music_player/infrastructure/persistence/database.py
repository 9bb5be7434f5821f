"""aiosqlite access for the player's document table.

Every operation opens its own connection. An in-memory database is shared
between those connections through SQLite's shared-cache URI, and one extra
connection is held open so the data survives between operations.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from local_music_player.domain.shared.constants import DatabaseTables, SQLPragmas
from local_music_player.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import DatabaseSettings

logger = logging.getLogger(__name__)

MEMORY = ":memory:"
_URL_PREFIX = "sqlite:///"

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {DatabaseTables.KV_DOCUMENTS} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
)
"""


def path_from_url(url: str) -> str:
    """Strip the ``sqlite:///`` prefix, leaving ``:memory:`` and bare paths alone."""
    return url.removeprefix(_URL_PREFIX)


class Database:
    """Connection factory plus small query helpers over aiosqlite."""

    def __init__(self, url: str, settings: DatabaseSettings | None = None) -> None:
        self._db_path = path_from_url(url)
        self._busy_timeout_ms = settings.busy_timeout_ms if settings else 5000
        self._timeout_s = settings.connection_timeout_s if settings else 10
        self._anchor: aiosqlite.Connection | None = None
        self._ready = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def is_initialized(self) -> bool:
        return self._ready

    @property
    def in_memory(self) -> bool:
        return self._db_path == MEMORY

    def _target(self) -> tuple[str, bool]:
        if self.in_memory:
            # id(self) keeps separate Database instances from seeing each other's data
            return f"file:local-music-player-{id(self)}?mode=memory&cache=shared", True
        return self._db_path, False

    async def _open(self) -> aiosqlite.Connection:
        target, uri = self._target()
        conn = await aiosqlite.connect(target, uri=uri, timeout=self._timeout_s)
        conn.row_factory = aiosqlite.Row
        await conn.execute(SQLPragmas.JOURNAL_MODE_WAL)
        await conn.execute(SQLPragmas.BUSY_TIMEOUT.format(timeout=self._busy_timeout_ms))
        return conn

    async def initialize(self) -> None:
        """Create the schema. Calling this again is a no-op."""
        if self._ready:
            return

        if self.in_memory:
            if self._anchor is None:
                self._anchor = await self._open()
            await self._anchor.execute(_SCHEMA)
            await self._anchor.commit()
        else:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            async with self.transaction() as conn:
                await conn.execute(_SCHEMA)

        self._ready = True
        logger.info(LogTemplates.DATABASE_INITIALIZED, self._db_path)

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        conn = await self._open()
        try:
            yield conn
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Yield a connection that commits on success and rolls back on error."""
        async with self.connection() as conn:
            try:
                yield conn
            except Exception:
                await conn.rollback()
                raise
            await conn.commit()

    async def execute(self, sql: str, parameters: Sequence[Any] = ()) -> None:
        async with self.transaction() as conn:
            await conn.execute(sql, tuple(parameters))

    async def fetch_all(self, sql: str, parameters: Sequence[Any] = ()) -> list[dict[str, Any]]:
        async with self.connection() as conn:
            rows = await conn.execute_fetchall(sql, tuple(parameters))
        return [dict(row) for row in rows]

    async def fetch_one(self, sql: str, parameters: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = await self.fetch_all(sql, parameters)
        return rows[0] if rows else None

    async def close(self) -> None:
        """Drop the in-memory anchor connection, if any, and mark the database closed."""
        anchor, self._anchor = self._anchor, None
        if anchor is not None:
            await anchor.close()
        self._ready = False
        logger.info(LogTemplates.DATABASE_CLOSED)
