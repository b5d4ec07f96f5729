"""Unit tests for the ACRCloud identification provider.

HTTP is served by ``httpx.MockTransport`` so requests go through a real
``httpx.AsyncClient`` without touching the network.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from src.config.settings import Settings
from src.models.track import ResolutionRequest
from src.providers.identification.acrcloud_provider import ACRCloudIdentificationProvider
from src.utils.errors import IdentificationError, ProviderUnavailableError, RateLimitError

ACR_TRACK = {
    "name": "Strobe",
    "acrid": "acr-strobe-001",
    "isrc": "USUS10900001",
    "score": 92,
    "duration_ms": 637000,
    "release_date": "2009-09-22",
    "artists": [{"name": "deadmau5"}, {"name": "Someone Else"}],
    "album": {"name": "For Lack of a Better Name", "cover": "https://cdn.acrcloud.com/strobe.jpg"},
    "external_metadata": {
        "spotify": [{"track": {"id": "2jKoVlU7VAmExKJ1Jh3w9P"}}],
        "applemusic": [{"link": "https://music.apple.com/us/album/strobe/1440743526?i=1440743532"}],
        "youtube": [{"vid": "tKi9Z-f6qX4"}],
    },
}


def _settings(**overrides) -> Settings:
    defaults = {
        "acrcloud_base_url": "https://acr.test/",
        "acrcloud_bearer_token": "acr-token",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _provider(
    handler: Callable[[httpx.Request], httpx.Response], **settings_overrides
) -> ACRCloudIdentificationProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ACRCloudIdentificationProvider(http_client=client, settings=_settings(**settings_overrides))


# ======================================================================
# Query construction
# ======================================================================


class TestBuildQuery:
    def test_acrid_first(self) -> None:
        request = ResolutionRequest(acrid="acr-1", isrc="USUS10900001")
        assert ACRCloudIdentificationProvider.build_query(request) == {"acr_id": "acr-1"}

    def test_isrc(self) -> None:
        request = ResolutionRequest(isrc="USUS10900001", spotify_url="https://open.spotify.com/track/a")
        assert ACRCloudIdentificationProvider.build_query(request) == {"isrc": "USUS10900001"}

    def test_spotify_url_before_audio_url(self) -> None:
        request = ResolutionRequest(
            spotify_url="https://open.spotify.com/track/a", audio_url="https://cdn.test/a.mp3"
        )
        assert ACRCloudIdentificationProvider.build_query(request) == {
            "source_url": "https://open.spotify.com/track/a"
        }

    def test_audio_url(self) -> None:
        request = ResolutionRequest(audio_url="https://cdn.test/a.mp3")
        assert ACRCloudIdentificationProvider.build_query(request) == {
            "source_url": "https://cdn.test/a.mp3"
        }

    def test_text_query_needs_both_hints(self) -> None:
        full = ResolutionRequest(hint_title="Strobe", hint_artist="deadmau5")
        assert ACRCloudIdentificationProvider.build_query(full) == {"query": "deadmau5 Strobe"}
        assert ACRCloudIdentificationProvider.build_query(ResolutionRequest(hint_title="Strobe")) is None


# ======================================================================
# Parsing
# ======================================================================


class TestParseTrack:
    def test_full_track(self) -> None:
        candidate = ACRCloudIdentificationProvider.parse_track(ACR_TRACK)

        assert candidate.title == "Strobe"
        assert candidate.artist == "deadmau5"
        assert candidate.album == "For Lack of a Better Name"
        assert candidate.isrc == "USUS10900001"
        assert candidate.cover_image_url == "https://cdn.acrcloud.com/strobe.jpg"
        assert candidate.confidence == pytest.approx(0.92)
        assert candidate.resolver_sources == ["acrcloud"]
        assert candidate.platform_links == {
            "spotify": "https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P",
            "apple_music": "https://music.apple.com/us/album/strobe/1440743526?i=1440743532",
            "youtube": "https://www.youtube.com/watch?v=tKi9Z-f6qX4",
        }
        assert candidate.acrid == "acr-strobe-001"
        assert candidate.identification.artists == ["deadmau5", "Someone Else"]
        assert candidate.identification.raw == ACR_TRACK

    def test_missing_score_is_exact_match(self) -> None:
        candidate = ACRCloudIdentificationProvider.parse_track({"name": "Strobe"})
        assert candidate.confidence == 1.0

    def test_score_clamped(self) -> None:
        assert ACRCloudIdentificationProvider.parse_track({"score": 140}).confidence == 1.0
        assert ACRCloudIdentificationProvider.parse_track({"score": -5}).confidence == 0.0

    def test_album_image_preferred_over_cover(self) -> None:
        track = {"album": {"images": [{"url": "https://img/1.jpg"}], "cover": "https://img/2.jpg"}}
        assert ACRCloudIdentificationProvider.parse_track(track).cover_image_url == "https://img/1.jpg"


# ======================================================================
# identify()
# ======================================================================


class TestIdentify:
    @pytest.mark.asyncio
    async def test_success_sends_query_and_auth(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": [ACR_TRACK]})

        provider = _provider(handler)
        candidate = await provider.identify(ResolutionRequest(isrc="USUS10900001"))

        assert candidate is not None
        assert candidate.title == "Strobe"
        sent = seen[0]
        assert sent.url.path == "/api/external-metadata/tracks"
        assert sent.url.host == "acr.test"
        assert sent.url.params["isrc"] == "USUS10900001"
        assert sent.url.params["platforms"] == "spotify,applemusic,youtube,amazonmusic,tidal"
        assert sent.headers["Authorization"] == "Bearer acr-token"

    @pytest.mark.asyncio
    async def test_no_identifier_makes_no_call(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no HTTP call expected")

        assert await _provider(handler).identify(ResolutionRequest()) is None

    @pytest.mark.asyncio
    async def test_empty_data_is_no_match(self) -> None:
        provider = _provider(lambda request: httpx.Response(200, json={"data": []}))
        assert await provider.identify(ResolutionRequest(acrid="acr-1")) is None

    @pytest.mark.asyncio
    async def test_missing_token_unavailable(self) -> None:
        provider = _provider(lambda request: httpx.Response(200), acrcloud_bearer_token="")
        assert provider.is_available() is False
        with pytest.raises(ProviderUnavailableError):
            await provider.identify(ResolutionRequest(acrid="acr-1"))

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        provider = _provider(lambda request: httpx.Response(429))
        with pytest.raises(RateLimitError):
            await provider.identify(ResolutionRequest(acrid="acr-1"))

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        provider = _provider(lambda request: httpx.Response(503))
        with pytest.raises(IdentificationError, match="HTTP 503"):
            await provider.identify(ResolutionRequest(acrid="acr-1"))

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(IdentificationError):
            await _provider(handler).identify(ResolutionRequest(acrid="acr-1"))

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        provider = _provider(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(IdentificationError, match="invalid JSON"):
            await provider.identify(ResolutionRequest(acrid="acr-1"))

    def test_provider_name(self) -> None:
        assert _provider(lambda request: httpx.Response(200)).get_provider_name() == "acrcloud"
