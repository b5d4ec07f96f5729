"""Central orchestrator for the track resolution pipeline.

Turns a :class:`ResolutionRequest` into a :class:`ResolutionResult` by
walking a fixed decision sequence:

    1. cache          - unless force_refresh; first present key wins
    2. identification - primary, fingerprint based (ACRCloud)
    3. acceptance     - strong: accept; ok: accept if hints agree
    4. catalog search - secondary (Spotify), only if step 3 did not accept
    5. combine        - merge both / identification only / catalog only / none
    6. finalize       - canonical platform, cache upsert, caller record update

ARCHITECTURE NOTE:
    ``resolve()`` never raises.  Every provider call is bounded by
    ``asyncio.wait_for`` and wrapped in ``except Exception``; a failing or
    slow source is simply absent for this request.  The only terminal
    failure is "no source produced a candidate", reported as
    ``success=False`` on the ``none`` path with manual review requested.

    With ``speculative_catalog_search`` enabled the catalog search starts
    alongside identification and is cancelled as soon as identification
    is accepted, trading an occasional wasted catalog call for latency.
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from src.config.resolver_config import ResolverConfig
from src.interfaces.catalog_provider import ICatalogSearchProvider
from src.interfaces.identification_provider import IIdentificationProvider
from src.models.track import (
    CachedResolution,
    ResolutionRequest,
    ResolutionResult,
    ResolverPath,
    TrackCandidate,
)
from src.services.candidate_merger import merge_candidates
from src.services.persistence_finalizer import PersistenceFinalizer
from src.services.resolution_cache import ResolutionCache
from src.utils.logging import get_logger
from src.utils.similarity import hint_similarity

NO_MATCH_ERROR = "All resolvers failed"


class TrackResolutionPipeline:
    """Cache → identification → catalog search → merge → persist.

    All collaborators are injected at construction time.  Either provider
    may be ``None`` (not configured), in which case that source is absent.
    """

    def __init__(
        self,
        identification_provider: IIdentificationProvider | None,
        catalog_provider: ICatalogSearchProvider | None,
        cache: ResolutionCache,
        finalizer: PersistenceFinalizer,
        config: ResolverConfig,
    ) -> None:
        self._identification = identification_provider
        self._catalog = catalog_provider
        self._cache = cache
        self._finalizer = finalizer
        self._config = config
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def config(self) -> ResolverConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        """Resolve *request*; always returns a well-formed result."""
        self._logger.info(
            "resolution_started",
            has_acrid=bool(request.acrid),
            has_isrc=bool(request.isrc),
            has_catalog_id=bool(request.catalog_track_id),
            has_audio_url=bool(request.audio_url),
            has_hints=request.has_full_hints,
            force_refresh=request.force_refresh,
        )
        try:
            return await self._resolve(request)
        except Exception as exc:
            self._logger.exception("resolution_crashed", error=str(exc))
            return ResolutionResult.failure(f"Resolution failed: {exc}")

    # ------------------------------------------------------------------
    # Decision sequence
    # ------------------------------------------------------------------

    async def _resolve(self, request: ResolutionRequest) -> ResolutionResult:
        if not request.force_refresh:
            cached = await self._cache.lookup(request)
            if cached is not None:
                return self._from_cache(cached)

        catalog_task: asyncio.Task[TrackCandidate | None] | None = None
        if self._config.speculative_catalog_search and self._catalog_usable():
            catalog_task = asyncio.create_task(self._search_catalog(request))

        try:
            identified, identification_error = await self._identify(request)

            if identified is not None:
                path = self._accept(identified, request)
                if path is not None:
                    return await self._finalizer.finalize(identified, path, request)

            if catalog_task is not None:
                searched = await catalog_task
                catalog_task = None
            else:
                searched = await self._search_catalog(request)
        finally:
            if catalog_task is not None and not catalog_task.done():
                catalog_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await catalog_task
                self._logger.debug("speculative_catalog_search_cancelled")

        if identified is not None and searched is not None:
            merged = merge_candidates(identified, searched, self._config.confidence_ok)
            return await self._finalizer.finalize(
                merged, ResolverPath.ACRCLOUD_FAILED_FALLBACK, request
            )
        if identified is not None:
            # Only source left: accepted as-is even below the ok threshold.
            return await self._finalizer.finalize(identified, ResolverPath.ACRCLOUD_OK, request)
        if searched is not None:
            return await self._finalizer.finalize(searched, ResolverPath.FALLBACK_ONLY, request)

        error = identification_error or NO_MATCH_ERROR
        self._logger.warning("resolution_no_candidate", error=error)
        return ResolutionResult.failure(error)

    def _accept(self, candidate: TrackCandidate, request: ResolutionRequest) -> ResolverPath | None:
        """Return the acceptance path for an identification, or ``None`` to fall through."""
        confidence = candidate.confidence
        if confidence >= self._config.confidence_strong:
            self._logger.info("identification_accepted_strong", confidence=confidence)
            return ResolverPath.ACRCLOUD_STRONG

        if confidence >= self._config.confidence_ok:
            similarity = hint_similarity(
                candidate,
                request,
                title_weight=self._config.title_weight,
                artist_weight=self._config.artist_weight,
            )
            if similarity >= self._config.hint_similarity_min:
                self._logger.info(
                    "identification_accepted_ok", confidence=confidence, similarity=similarity
                )
                return ResolverPath.ACRCLOUD_OK
            self._logger.info(
                "identification_hint_mismatch", confidence=confidence, similarity=similarity
            )
            return None

        self._logger.info("identification_low_confidence", confidence=confidence)
        return None

    def _from_cache(self, cached: CachedResolution) -> ResolutionResult:
        candidate = cached.to_candidate()
        platform, url = self._finalizer.canonical_for(candidate)
        return ResolutionResult.from_candidate(
            candidate,
            ResolverPath.CACHE,
            canonical_platform=platform,
            canonical_url=url,
            track_resolution_id=cached.id,
        )

    # ------------------------------------------------------------------
    # Source calls
    # ------------------------------------------------------------------

    async def _identify(self, request: ResolutionRequest) -> tuple[TrackCandidate | None, str | None]:
        """Run identification; returns ``(candidate, error)`` and never raises."""
        provider = self._identification
        if provider is None or not provider.is_available():
            self._logger.info("identification_skipped", reason="provider not configured")
            return None, None

        timeout = self._config.provider_timeout_seconds
        try:
            candidate = await asyncio.wait_for(provider.identify(request), timeout=timeout)
        except asyncio.TimeoutError:
            error = f"[{provider.get_provider_name()}] identification timed out after {timeout}s"
            self._logger.warning("identification_timeout", timeout=timeout)
            return None, error
        except Exception as exc:
            self._logger.warning("identification_failed", error=str(exc))
            return None, str(exc)
        return candidate, None

    def _catalog_usable(self) -> bool:
        return self._catalog is not None and self._catalog.is_available()

    async def _search_catalog(self, request: ResolutionRequest) -> TrackCandidate | None:
        """Run catalog search; ``None`` on no match, timeout or error."""
        if not self._catalog_usable():
            self._logger.info("catalog_search_skipped", reason="provider not configured")
            return None

        timeout = self._config.provider_timeout_seconds
        try:
            return await asyncio.wait_for(self._catalog.find_track(request), timeout=timeout)
        except asyncio.TimeoutError:
            self._logger.warning("catalog_search_timeout", timeout=timeout)
        except Exception as exc:
            self._logger.warning("catalog_search_failed", error=str(exc))
        return None
