"""Spotify catalog provider implementing ICatalogSearchProvider.

Uses the Spotify Web API with the client-credentials flow.  The access
token is kept in an :class:`~src.interfaces.cache_provider.ICacheProvider`
until shortly before it expires, and is refreshed once if the API answers
401.

Lookups, strongest first:

    1. ``GET /v1/tracks/{id}``            confidence 0.90  source "spotify_direct"
    2. ``GET /v1/search?q=isrc:<ISRC>``   confidence 0.85  source "spotify_isrc"
    3. ``GET /v1/search?q=<artist title>`` confidence 0.70  source "spotify_search"
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

import httpx

from src.config.settings import Settings
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.catalog_provider import ICatalogSearchProvider
from src.models.track import ResolutionRequest, TrackCandidate
from src.utils.errors import CatalogSearchError, ProviderUnavailableError, RateLimitError, ResolverError
from src.utils.logging import get_logger

_TOKEN_URL = "https://accounts.spotify.com/api/token"
_API_BASE = "https://api.spotify.com/v1"
_TOKEN_CACHE_KEY = "spotify:access_token"
# Refresh this many seconds before the issuer's expiry.
_TOKEN_EXPIRY_MARGIN = 30

PROVIDER_NAME = "spotify"
DIRECT_CONFIDENCE = 0.90
ISRC_CONFIDENCE = 0.85
SEARCH_CONFIDENCE = 0.70


class SpotifyCatalogProvider(ICatalogSearchProvider):
    """Secondary resolution source backed by the Spotify Web API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        token_cache: ICacheProvider,
    ) -> None:
        self._http = http_client
        self._client_id = settings.spotify_client_id
        self._client_secret = settings.spotify_client_secret
        self._token_cache = token_cache
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Auth / transport
    # ------------------------------------------------------------------

    async def _get_token(self) -> str:
        cached = await self._token_cache.get(_TOKEN_CACHE_KEY)
        if cached:
            return cached
        if not self.is_available():
            raise ProviderUnavailableError(
                message="Spotify client credentials not configured",
                provider_name=PROVIDER_NAME,
            )

        try:
            response = await self._http.post(
                _TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CatalogSearchError(
                message=f"Spotify token request failed: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc

        token = payload.get("access_token")
        if not token:
            raise CatalogSearchError(
                message="Spotify token response had no access_token",
                provider_name=PROVIDER_NAME,
            )
        expires_in = int(payload.get("expires_in") or 0)
        await self._token_cache.set(
            _TOKEN_CACHE_KEY, token, ttl=max(0, expires_in - _TOKEN_EXPIRY_MARGIN)
        )
        self._logger.debug("spotify_token_refreshed", expires_in=expires_in)
        return token

    async def _send(self, url: str, params: dict[str, Any] | None) -> httpx.Response:
        token = await self._get_token()
        try:
            return await self._http.get(
                url, params=params, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as exc:
            raise CatalogSearchError(
                message=f"Spotify request failed: {exc}",
                provider_name=PROVIDER_NAME,
            ) from exc

    async def _api_get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        """GET an API path; ``None`` on 404, raises on any other failure."""
        url = f"{_API_BASE}{path}"
        response = await self._send(url, params)
        if response.status_code == 401:
            # Token revoked or expired early; fetch a fresh one once.
            await self._token_cache.delete(_TOKEN_CACHE_KEY)
            response = await self._send(url, params)

        if response.status_code == 404:
            return None
        if response.status_code == 429:
            raise RateLimitError(message="Spotify rate limit exceeded", provider_name=PROVIDER_NAME)
        if response.status_code >= 400:
            raise CatalogSearchError(
                message=f"Spotify returned HTTP {response.status_code} for {path}",
                provider_name=PROVIDER_NAME,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogSearchError(
                message="Spotify returned an invalid JSON body",
                provider_name=PROVIDER_NAME,
            ) from exc

    async def _search_first(self, query: str) -> dict[str, Any] | None:
        payload = await self._api_get("/search", params={"q": query, "type": "track", "limit": 1})
        items = ((payload or {}).get("tracks") or {}).get("items") or []
        return items[0] if items and isinstance(items[0], dict) else None

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def parse_track(track: dict[str, Any], confidence: float, source: str) -> TrackCandidate:
        """Normalize a Spotify track object into a candidate."""
        artists = track.get("artists") or []
        album = track.get("album") or {}
        images = album.get("images") or []
        external_ids = track.get("external_ids") or {}
        url = (track.get("external_urls") or {}).get("spotify")
        if not url and track.get("id"):
            url = f"https://open.spotify.com/track/{track['id']}"

        return TrackCandidate(
            title=track.get("name"),
            artist=artists[0].get("name") if artists else None,
            album=album.get("name"),
            isrc=external_ids.get("isrc"),
            duration_ms=track.get("duration_ms"),
            cover_image_url=images[0].get("url") if images else None,
            platform_links={PROVIDER_NAME: url} if url else {},
            confidence=confidence,
            resolver_sources=[source],
            needs_manual_review=False,
        )

    # ------------------------------------------------------------------
    # ICatalogSearchProvider implementation
    # ------------------------------------------------------------------

    async def get_track(self, track_id: str) -> TrackCandidate | None:
        track = await self._api_get(f"/tracks/{track_id}")
        if not track:
            return None
        return self.parse_track(track, DIRECT_CONFIDENCE, "spotify_direct")

    async def search_by_isrc(self, isrc: str) -> TrackCandidate | None:
        track = await self._search_first(f"isrc:{isrc}")
        if not track:
            return None
        return self.parse_track(track, ISRC_CONFIDENCE, "spotify_isrc")

    async def search(self, artist: str, title: str) -> TrackCandidate | None:
        track = await self._search_first(f"{artist} {title}")
        if not track:
            return None
        return self.parse_track(track, SEARCH_CONFIDENCE, "spotify_search")

    async def find_track(self, request: ResolutionRequest) -> TrackCandidate | None:
        strategies: list[tuple[str, Callable[[], Awaitable[TrackCandidate | None]]]] = []
        track_id = request.catalog_track_id
        if track_id:
            strategies.append(("direct", partial(self.get_track, track_id)))
        if request.isrc:
            strategies.append(("isrc", partial(self.search_by_isrc, request.isrc)))
        if request.has_full_hints:
            strategies.append(("search", partial(self.search, request.hint_artist, request.hint_title)))

        for name, strategy in strategies:
            try:
                candidate = await strategy()
            except ProviderUnavailableError:
                raise
            except ResolverError as exc:
                self._logger.warning("spotify_lookup_failed", strategy=name, error=str(exc))
                continue
            if candidate is not None:
                self._logger.info(
                    "spotify_match", strategy=name, title=candidate.title, confidence=candidate.confidence
                )
                return candidate

        self._logger.info("spotify_no_match", strategies=[name for name, _ in strategies])
        return None

    def get_provider_name(self) -> str:
        return PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._client_id and self._client_secret)
