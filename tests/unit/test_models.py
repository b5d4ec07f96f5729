"""Unit tests for the track resolution models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.models.track import (
    CachedResolution,
    ResolutionRequest,
    ResolutionResult,
    ResolutionStatus,
    ResolverPath,
    TrackCandidate,
)


class TestResolutionRequest:
    def test_blank_strings_become_none(self) -> None:
        request = ResolutionRequest(isrc="  ", hint_title="", hint_artist=" deadmau5 ")
        assert request.isrc is None
        assert request.hint_title is None
        assert request.hint_artist == "deadmau5"

    def test_catalog_track_id_from_url(self) -> None:
        request = ResolutionRequest(spotify_url="https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P")
        assert request.catalog_track_id == "2jKoVlU7VAmExKJ1Jh3w9P"

    def test_explicit_track_id_wins(self) -> None:
        request = ResolutionRequest(
            spotify_url="https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P",
            spotify_track_id="0ve9wYVmSfTaPrEBNaXxIk",
        )
        assert request.catalog_track_id == "0ve9wYVmSfTaPrEBNaXxIk"

    def test_has_full_hints(self) -> None:
        assert ResolutionRequest(hint_title="Strobe", hint_artist="deadmau5").has_full_hints
        assert not ResolutionRequest(hint_title="Strobe").has_full_hints

    def test_frozen(self) -> None:
        request = ResolutionRequest(isrc="USUS10900001")
        with pytest.raises(ValidationError):
            request.isrc = "other"


class TestTrackCandidate:
    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            TrackCandidate(confidence=1.5)
        with pytest.raises(ValidationError):
            TrackCandidate(confidence=-0.1)

    def test_acrid_without_identification(self) -> None:
        assert TrackCandidate().acrid is None


class TestResolutionResult:
    def test_failure(self) -> None:
        result = ResolutionResult.failure("All resolvers failed")
        assert result.success is False
        assert result.resolver_path is ResolverPath.NONE
        assert result.confidence == 0.0
        assert result.needs_manual_review is True
        assert result.error == "All resolvers failed"

    def test_from_candidate_copies_track_fields(self, make_identified) -> None:
        candidate = make_identified(0.92)
        result = ResolutionResult.from_candidate(
            candidate, ResolverPath.ACRCLOUD_STRONG, canonical_platform="spotify"
        )
        assert result.success is True
        assert result.title == "Strobe"
        assert result.platform_links == candidate.platform_links
        assert result.acrid == "acr-strobe-001"
        assert result.canonical_platform == "spotify"
        assert result.caller_record_updated is None

    def test_path_serializes_as_string(self) -> None:
        dumped = ResolutionResult.failure("x").model_dump(mode="json")
        assert dumped["resolver_path"] == "none"


class TestCachedResolution:
    def test_platform_links_from_columns(self) -> None:
        row = CachedResolution(
            id="r1",
            spotify_url="https://open.spotify.com/track/a",
            tidal_url="https://listen.tidal.com/track/1",
        )
        assert row.platform_links == {
            "spotify": "https://open.spotify.com/track/a",
            "tidal": "https://listen.tidal.com/track/1",
        }

    def test_to_candidate(self) -> None:
        row = CachedResolution(
            id="r1",
            title="Strobe",
            acrid="acr-1",
            acrcloud_raw={"score": 92},
            confidence=0.92,
            resolver_sources=["acrcloud"],
            status=ResolutionStatus.RESOLVED,
        )
        candidate = row.to_candidate()
        assert candidate.title == "Strobe"
        assert candidate.acrid == "acr-1"
        assert candidate.identification.raw == {"score": 92}
        assert candidate.needs_manual_review is False

    def test_to_candidate_rebuilds_identification_block(self) -> None:
        raw = {
            "acrid": "acr-1",
            "name": "Strobe",
            "score": 92,
            "artists": [{"name": "deadmau5"}, {"name": "Someone Else"}],
            "album": {"name": "For Lack of a Better Name"},
            "release_date": "2009-09-22",
        }
        row = CachedResolution(id="r1", acrid="acr-1", acrcloud_raw=raw, confidence=0.92)

        identification = row.to_candidate().identification

        assert identification.acrid == "acr-1"
        assert identification.score == pytest.approx(0.92)
        assert identification.title == "Strobe"
        assert identification.artists == ["deadmau5", "Someone Else"]
        assert identification.album == "For Lack of a Better Name"
        assert identification.release_date == "2009-09-22"

    def test_to_candidate_with_acrid_only(self) -> None:
        row = CachedResolution(id="r1", acrid="acr-1", confidence=0.92)
        identification = row.to_candidate().identification
        assert identification.acrid == "acr-1"
        assert identification.raw == {}

    def test_needs_review_status_flags_candidate(self) -> None:
        row = CachedResolution(id="r1", confidence=0.55, status=ResolutionStatus.NEEDS_REVIEW)
        assert row.to_candidate().needs_manual_review is True
        assert row.to_candidate().identification is None
