"""Finalization of an accepted resolution.

Every accepted candidate passes through :class:`PersistenceFinalizer`,
which:

1. selects the canonical platform and URL,
2. upserts the candidate into the resolution cache (only when it carries a
   fingerprint ID or an ISRC, the two keys a later upsert can find it by),
3. points the caller's smart link at the cached resolution, best-effort.

Steps 2 and 3 are independent writes.  Either may fail; failures are
logged and reported on the result through ``persisted`` and
``caller_record_updated`` without failing the resolution.
"""

from __future__ import annotations

from typing import Any

from src.config.resolver_config import ResolverConfig
from src.interfaces.resolution_store import IResolutionStore, ISmartLinkStore
from src.models.track import (
    PLATFORM_URL_COLUMNS,
    ResolutionRequest,
    ResolutionResult,
    ResolutionStatus,
    ResolverPath,
    TrackCandidate,
)
from src.utils.canonical import select_canonical_platform
from src.utils.logging import get_logger
from src.utils.platform_links import extract_apple_music_id, extract_spotify_track_id


class PersistenceFinalizer:
    """Turns an accepted candidate into a persisted :class:`ResolutionResult`."""

    def __init__(
        self,
        store: IResolutionStore,
        config: ResolverConfig,
        smart_links: ISmartLinkStore | None = None,
    ) -> None:
        self._store = store
        self._smart_links = smart_links
        self._config = config
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def canonical_for(self, candidate: TrackCandidate) -> tuple[str, str | None]:
        return select_canonical_platform(
            candidate.platform_links,
            self._config.platform_priority,
            self._config.default_platform,
        )

    def build_row(self, candidate: TrackCandidate) -> dict[str, Any]:
        """Build the ``track_resolutions`` column values for *candidate*."""
        links = candidate.platform_links
        status = (
            ResolutionStatus.RESOLVED
            if candidate.confidence >= self._config.confidence_ok
            else ResolutionStatus.NEEDS_REVIEW
        )
        row: dict[str, Any] = {
            "isrc": candidate.isrc,
            "title": candidate.title,
            "artist": candidate.artist,
            "album": candidate.album,
            "duration_ms": candidate.duration_ms,
            "cover_image_url": candidate.cover_image_url,
            "spotify_track_id": extract_spotify_track_id(links.get("spotify")),
            "apple_music_id": extract_apple_music_id(links.get("apple_music")),
            "acrid": candidate.acrid,
            "acrcloud_raw": candidate.identification.raw if candidate.identification else None,
            "resolver_sources": list(candidate.resolver_sources),
            "confidence": candidate.confidence,
            "status": status,
        }
        for platform, column in PLATFORM_URL_COLUMNS.items():
            row[column] = links.get(platform)
        return row

    async def finalize(
        self,
        candidate: TrackCandidate,
        resolver_path: ResolverPath,
        request: ResolutionRequest,
    ) -> ResolutionResult:
        """Persist *candidate* and return the caller-facing result.

        Never raises for storage problems; see the module docstring.
        """
        platform, url = self.canonical_for(candidate)
        resolution_id = await self._upsert(candidate)

        caller_updated: bool | None = None
        if request.smart_link_id:
            caller_updated = False
            if resolution_id:
                caller_updated = await self._attach(request.smart_link_id, resolution_id, candidate)

        self._logger.info(
            "resolution_finalized",
            resolver_path=resolver_path.value,
            confidence=candidate.confidence,
            canonical_platform=platform,
            track_resolution_id=resolution_id,
            caller_record_updated=caller_updated,
        )
        return ResolutionResult.from_candidate(
            candidate,
            resolver_path,
            canonical_platform=platform,
            canonical_url=url,
            track_resolution_id=resolution_id,
            persisted=resolution_id is not None,
            caller_record_updated=caller_updated,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _upsert(self, candidate: TrackCandidate) -> str | None:
        acrid = candidate.acrid
        if not acrid and not candidate.isrc:
            self._logger.info("resolution_not_cacheable", reason="no acrid or isrc")
            return None

        key, value = ("acrid", acrid) if acrid else ("isrc", candidate.isrc)
        row = self.build_row(candidate)
        try:
            existing = await self._store.find_by_key(key, value)
            if existing is not None:
                await self._store.update(existing.id, row)
                return existing.id
            return await self._store.insert(row)
        except Exception as exc:
            self._logger.error("resolution_persist_failed", key=key, error=str(exc))
            return None

    async def _attach(self, smart_link_id: str, resolution_id: str, candidate: TrackCandidate) -> bool:
        if self._smart_links is None:
            self._logger.warning("smart_link_store_not_configured", smart_link_id=smart_link_id)
            return False
        try:
            updated = await self._smart_links.attach_resolution(
                smart_link_id=smart_link_id,
                track_resolution_id=resolution_id,
                resolved_isrc=candidate.isrc,
                resolver_confidence=candidate.confidence,
                resolver_sources=list(candidate.resolver_sources),
            )
        except Exception as exc:
            self._logger.error("smart_link_update_failed", smart_link_id=smart_link_id, error=str(exc))
            return False
        if not updated:
            self._logger.warning("smart_link_not_found", smart_link_id=smart_link_id)
        return updated
