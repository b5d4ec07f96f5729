"""ACRCloud identification provider implementing IIdentificationProvider.

Calls ACRCloud's External Metadata API
(``GET {base}/api/external-metadata/tracks``) with a bearer token.  The
API resolves one identifier (fingerprint ID, ISRC, a source URL or a
free-text query) to tracks carrying per-platform ``external_metadata``;
only the first track is used.

Query priority: ``acr_id`` > ``isrc`` > ``source_url`` (catalog URL, then
audio URL) > ``query`` ("artist title", needs both hints).  The API's
0-100 ``score`` becomes the candidate confidence on a 0-1 scale; tracks
without a score are treated as exact matches.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.config.settings import Settings
from src.interfaces.identification_provider import IIdentificationProvider
from src.models.track import IdentificationMatch, ResolutionRequest, TrackCandidate
from src.utils.errors import IdentificationError, ProviderUnavailableError, RateLimitError
from src.utils.logging import get_logger
from src.utils.platform_links import normalize_platform_links

_TRACKS_PATH = "/api/external-metadata/tracks"
# The API accepts at most five platforms per request.
DEFAULT_PLATFORMS = "spotify,applemusic,youtube,amazonmusic,tidal"
SOURCE_NAME = "acrcloud"


class ACRCloudIdentificationProvider(IIdentificationProvider):
    """Primary identification source backed by ACRCloud external metadata.

    Parameters
    ----------
    http_client:
        Shared ``httpx.AsyncClient``; its timeout bounds every call.
    settings:
        Supplies ``acrcloud_base_url`` and ``acrcloud_bearer_token``.
    platforms:
        Comma-separated ACRCloud platform names to request links for.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        platforms: str = DEFAULT_PLATFORMS,
    ) -> None:
        self._http = http_client
        self._base_url = settings.acrcloud_base_url.rstrip("/")
        self._token = settings.acrcloud_bearer_token
        self._platforms = platforms
        self._logger = get_logger(__name__)

    # -- Query construction ----------------------------------------------------

    @staticmethod
    def build_query(request: ResolutionRequest) -> dict[str, str] | None:
        """Return the identifier query for *request*, or ``None`` if it has none."""
        if request.acrid:
            return {"acr_id": request.acrid}
        if request.isrc:
            return {"isrc": request.isrc}
        if request.spotify_url:
            return {"source_url": request.spotify_url}
        if request.audio_url:
            return {"source_url": request.audio_url}
        if request.has_full_hints:
            return {"query": f"{request.hint_artist} {request.hint_title}"}
        return None

    # -- IIdentificationProvider implementation --------------------------------

    async def identify(self, request: ResolutionRequest) -> TrackCandidate | None:
        query = self.build_query(request)
        if query is None:
            self._logger.debug("acrcloud_no_identifier")
            return None
        if not self.is_available():
            raise ProviderUnavailableError(
                message="ACRCLOUD_BEARER_TOKEN not configured",
                provider_name=SOURCE_NAME,
            )

        params = {**query, "platforms": self._platforms}
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        mode = next(iter(query))
        self._logger.info("acrcloud_request", mode=mode)

        try:
            response = await self._http.get(
                f"{self._base_url}{_TRACKS_PATH}", params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            raise IdentificationError(
                message=f"ACRCloud request failed: {exc}",
                provider_name=SOURCE_NAME,
            ) from exc

        if response.status_code == 429:
            raise RateLimitError(message="ACRCloud rate limit exceeded", provider_name=SOURCE_NAME)
        if response.status_code >= 400:
            raise IdentificationError(
                message=f"ACRCloud returned HTTP {response.status_code}",
                provider_name=SOURCE_NAME,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise IdentificationError(
                message="ACRCloud returned an invalid JSON body",
                provider_name=SOURCE_NAME,
            ) from exc

        tracks = body.get("data") if isinstance(body, dict) else None
        if not isinstance(tracks, list) or not tracks or not isinstance(tracks[0], dict):
            self._logger.info("acrcloud_no_match", mode=mode)
            return None

        candidate = self.parse_track(tracks[0])
        self._logger.info(
            "acrcloud_match",
            mode=mode,
            title=candidate.title,
            confidence=candidate.confidence,
            platforms=sorted(candidate.platform_links),
        )
        return candidate

    def get_provider_name(self) -> str:
        return SOURCE_NAME

    def is_available(self) -> bool:
        return bool(self._token)

    # -- Parsing ---------------------------------------------------------------

    @staticmethod
    def parse_track(track: dict[str, Any]) -> TrackCandidate:
        """Normalize one ACRCloud track object into a candidate."""
        identification = IdentificationMatch.from_track(track)

        album = track.get("album") if isinstance(track.get("album"), dict) else {}
        images = album.get("images") if isinstance(album.get("images"), list) else []
        cover = None
        if images and isinstance(images[0], dict):
            cover = images[0].get("url")
        cover = cover or album.get("cover")

        normalized = normalize_platform_links(track.get("external_metadata"))
        external_ids = track.get("external_ids") if isinstance(track.get("external_ids"), dict) else {}
        isrc = normalized.raw_ids.get("isrc") or external_ids.get("isrc") or track.get("isrc")

        duration = track.get("duration_ms")

        return TrackCandidate(
            title=identification.title or None,
            artist=identification.artists[0] if identification.artists else None,
            album=identification.album or None,
            isrc=isrc or None,
            duration_ms=int(duration) if duration else None,
            cover_image_url=cover or None,
            platform_links=dict(normalized.links),
            confidence=identification.score,
            resolver_sources=[SOURCE_NAME],
            needs_manual_review=False,
            identification=identification,
        )
