"""SQLite-backed smart-link (caller record) store.

Smart links are the records callers resolve tracks for.  The resolver only
ever writes the back-reference columns of an existing link; creating links
is offered for the CLI and tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.resolution_store import ISmartLinkStore
from src.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/resolver.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS smart_links (
    id                   TEXT PRIMARY KEY,
    title                TEXT,
    track_resolution_id  TEXT,
    resolved_isrc        TEXT,
    resolver_confidence  REAL,
    resolver_sources     TEXT,
    created_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_ATTACH_SQL = """\
UPDATE smart_links
SET track_resolution_id = ?,
    resolved_isrc       = ?,
    resolver_confidence = ?,
    resolver_sources    = ?,
    updated_at          = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
WHERE id = ?;
"""


class SQLiteSmartLinkStore(ISmartLinkStore):
    """SQLite-backed ``smart_links`` persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the smart_links table if it doesn't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            await db.commit()
        logger.info("smart_link_db_initialized", path=str(self._db_path))

    async def create(self, smart_link_id: str, title: str | None = None) -> None:
        """Insert an empty smart link (no-op if it already exists)."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                "INSERT OR IGNORE INTO smart_links (id, title) VALUES (?, ?)",
                (smart_link_id, title),
            )
            await db.commit()

    async def get(self, smart_link_id: str) -> dict[str, Any] | None:
        """Return the smart link row as a dict, or ``None``."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM smart_links WHERE id = ?", (smart_link_id,))
            row = await cursor.fetchone()
        if row is None:
            return None
        result = dict(row)
        if result.get("resolver_sources"):
            result["resolver_sources"] = json.loads(result["resolver_sources"])
        return result

    async def attach_resolution(
        self,
        smart_link_id: str,
        track_resolution_id: str,
        resolved_isrc: str | None,
        resolver_confidence: float,
        resolver_sources: list[str],
    ) -> bool:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    _ATTACH_SQL,
                    (
                        track_resolution_id,
                        resolved_isrc,
                        resolver_confidence,
                        json.dumps(resolver_sources),
                        smart_link_id,
                    ),
                )
                await db.commit()
                updated = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Smart link update failed: {exc}",
                provider_name="sqlite",
            ) from exc

        logger.info(
            "smart_link_resolution_attached",
            smart_link_id=smart_link_id,
            track_resolution_id=track_resolution_id,
            updated=updated,
        )
        return updated
