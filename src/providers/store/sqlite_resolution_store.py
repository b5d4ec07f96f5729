"""SQLite-backed resolution cache store.

Persists resolved tracks to the ``track_resolutions`` table of a local
SQLite database (``data/resolver.db`` by default) using ``aiosqlite``.
Rows are looked up by fingerprint ID, ISRC or Spotify track ID and are
never deleted; re-resolutions overwrite them in place.
"""

from __future__ import annotations

import json
import uuid
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from src.interfaces.resolution_store import LOOKUP_KEYS, IResolutionStore
from src.models.track import CachedResolution
from src.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/resolver.db")
_PROVIDER_NAME = "sqlite"

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS track_resolutions (
    id                TEXT PRIMARY KEY,
    isrc              TEXT,
    title             TEXT,
    artist            TEXT,
    album             TEXT,
    duration_ms       INTEGER,
    cover_image_url   TEXT,
    spotify_url       TEXT,
    apple_music_url   TEXT,
    youtube_url       TEXT,
    youtube_music_url TEXT,
    tidal_url         TEXT,
    deezer_url        TEXT,
    amazon_url        TEXT,
    soundcloud_url    TEXT,
    spotify_track_id  TEXT,
    apple_music_id    TEXT,
    acrid             TEXT,
    acrcloud_raw      TEXT,
    resolver_sources  TEXT    NOT NULL DEFAULT '[]',
    confidence        REAL    NOT NULL DEFAULT 0,
    status            TEXT    NOT NULL DEFAULT 'needs_review',
    created_at        TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at        TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_track_resolutions_acrid ON track_resolutions(acrid);",
    "CREATE INDEX IF NOT EXISTS idx_track_resolutions_isrc ON track_resolutions(isrc);",
    "CREATE INDEX IF NOT EXISTS idx_track_resolutions_spotify ON track_resolutions(spotify_track_id);",
]

# Writable columns; id and the timestamps are managed here.
_COLUMNS: tuple[str, ...] = (
    "isrc",
    "title",
    "artist",
    "album",
    "duration_ms",
    "cover_image_url",
    "spotify_url",
    "apple_music_url",
    "youtube_url",
    "youtube_music_url",
    "tidal_url",
    "deezer_url",
    "amazon_url",
    "soundcloud_url",
    "spotify_track_id",
    "apple_music_id",
    "acrid",
    "acrcloud_raw",
    "resolver_sources",
    "confidence",
    "status",
)
_JSON_COLUMNS = frozenset({"acrcloud_raw", "resolver_sources"})


def _encode(row: dict[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for column in _COLUMNS:
        if column not in row:
            continue
        value = row[column]
        if column in _JSON_COLUMNS and value is not None:
            value = json.dumps(value)
        elif isinstance(value, Enum):
            value = value.value
        encoded[column] = value
    return encoded


def _decode(row: aiosqlite.Row) -> CachedResolution:
    data = dict(row)
    for column in _JSON_COLUMNS:
        if data.get(column):
            data[column] = json.loads(data[column])
    if data.get("resolver_sources") is None:
        data["resolver_sources"] = []
    return CachedResolution.model_validate(data)


class SQLiteResolutionStore(IResolutionStore):
    """SQLite-backed ``track_resolutions`` persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Create the table and lookup indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("resolution_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # IResolutionStore implementation
    # ------------------------------------------------------------------

    async def find_by_key(self, key: str, value: str) -> CachedResolution | None:
        if key not in LOOKUP_KEYS:
            msg = f"Unsupported lookup key {key!r}; expected one of {LOOKUP_KEYS}"
            raise ValueError(msg)
        # key is whitelisted above, so interpolating the column name is safe.
        sql = f"SELECT * FROM track_resolutions WHERE {key} = ? ORDER BY confidence DESC LIMIT 1"
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, (value,))
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Resolution lookup by {key} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        return _decode(row) if row is not None else None

    async def find_by_id(self, resolution_id: str) -> CachedResolution | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    "SELECT * FROM track_resolutions WHERE id = ?", (resolution_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Resolution lookup by id failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        return _decode(row) if row is not None else None

    async def insert(self, row: dict[str, Any]) -> str:
        resolution_id = uuid.uuid4().hex
        encoded = _encode(row)
        columns = ["id", *encoded]
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO track_resolutions ({', '.join(columns)}) VALUES ({placeholders})"
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(sql, (resolution_id, *encoded.values()))
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Resolution insert failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        logger.info("resolution_inserted", resolution_id=resolution_id, isrc=row.get("isrc"))
        return resolution_id

    async def update(self, resolution_id: str, row: dict[str, Any]) -> None:
        encoded = _encode(row)
        assignments = "".join(f"{column} = ?, " for column in encoded)
        sql = (
            f"UPDATE track_resolutions SET {assignments}"
            "updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now') WHERE id = ?"
        )
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(sql, (*encoded.values(), resolution_id))
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(
                message=f"Resolution update failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        logger.info("resolution_updated", resolution_id=resolution_id, isrc=row.get("isrc"))
