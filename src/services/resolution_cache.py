"""Cache lookup in front of the resolution pipeline.

Wraps an :class:`IResolutionStore` with the resolver's lookup rules: the
first identifier present on the request (fingerprint ID, then ISRC, then
Spotify track ID) is the only one tried, and rows below the minimum
confidence count as misses.  A failing store is logged and treated as a
miss so the pipeline can still resolve from the providers.
"""

from __future__ import annotations

from src.interfaces.resolution_store import IResolutionStore
from src.models.track import CachedResolution, ResolutionRequest
from src.utils.logging import get_logger


class ResolutionCache:
    """Read side of the resolution cache."""

    def __init__(self, store: IResolutionStore, min_confidence: float) -> None:
        self._store = store
        self._min_confidence = min_confidence
        self._logger = get_logger(__name__)

    @staticmethod
    def lookup_key(request: ResolutionRequest) -> tuple[str, str] | None:
        """Return the ``(column, value)`` pair used to look *request* up."""
        if request.acrid:
            return "acrid", request.acrid
        if request.isrc:
            return "isrc", request.isrc
        track_id = request.catalog_track_id
        if track_id:
            return "spotify_track_id", track_id
        return None

    async def lookup(self, request: ResolutionRequest) -> CachedResolution | None:
        """Return a usable cached resolution for *request*, or ``None``."""
        key = self.lookup_key(request)
        if key is None:
            return None

        column, value = key
        try:
            row = await self._store.find_by_key(column, value)
        except Exception as exc:
            self._logger.warning("cache_lookup_failed", key=column, error=str(exc))
            return None

        if row is None:
            self._logger.debug("cache_miss", key=column)
            return None
        if row.confidence < self._min_confidence:
            self._logger.info(
                "cache_row_below_minimum",
                key=column,
                resolution_id=row.id,
                confidence=row.confidence,
            )
            return None

        self._logger.info("cache_hit", key=column, resolution_id=row.id, confidence=row.confidence)
        return row
