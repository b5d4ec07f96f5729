"""Track resolution domain models.

Defines Pydantic v2 models for the resolver's input, the intermediate
candidates produced by each source, the caller-facing result, and the
durable cache row.  All models use frozen config; new versions are made
with ``model_copy(update={...})``.

Flow:
    ResolutionRequest  ->  TrackCandidate (identification / catalog search)
                       ->  TrackCandidate (merged)
                       ->  ResolutionResult (+ canonical link, persistence report)
    CachedResolution   <-> track_resolutions table
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.utils.platform_links import extract_spotify_track_id


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------
class ResolverPath(str, Enum):  # noqa: UP042
    """Which decision branch produced a resolution.

    Serialized as the plain string value in JSON responses.
    """

    CACHE = "cache"                                        # Served from track_resolutions
    ACRCLOUD_STRONG = "acrcloud_strong"                    # Identification >= strong threshold
    ACRCLOUD_OK = "acrcloud_ok"                            # Medium confidence, hints agree (or only source)
    FALLBACK_ONLY = "fallback_only"                        # Catalog search alone
    ACRCLOUD_FAILED_FALLBACK = "acrcloud_failed_fallback"  # Both sources merged
    NONE = "none"                                          # Nothing found


class ResolutionStatus(str, Enum):  # noqa: UP042
    """Stored status of a cached resolution."""

    RESOLVED = "resolved"
    NEEDS_REVIEW = "needs_review"


# Resolver platform name -> track_resolutions URL column.
PLATFORM_URL_COLUMNS: dict[str, str] = {
    "spotify": "spotify_url",
    "apple_music": "apple_music_url",
    "youtube": "youtube_url",
    "youtube_music": "youtube_music_url",
    "tidal": "tidal_url",
    "deezer": "deezer_url",
    "amazon": "amazon_url",
    "soundcloud": "soundcloud_url",
}


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------
class ResolutionRequest(BaseModel):
    """A fragmentary track reference to resolve.

    Every field is optional.  A request with nothing usable is valid; it
    simply resolves to ``ResolverPath.NONE``.
    """

    model_config = ConfigDict(frozen=True)

    acrid: str | None = None
    isrc: str | None = None
    audio_url: str | None = None
    spotify_url: str | None = None
    spotify_track_id: str | None = None
    hint_title: str | None = None
    hint_artist: str | None = None
    hint_album: str | None = None
    smart_link_id: str | None = None
    force_refresh: bool = False

    @field_validator(
        "acrid",
        "isrc",
        "audio_url",
        "spotify_url",
        "spotify_track_id",
        "hint_title",
        "hint_artist",
        "hint_album",
        "smart_link_id",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def catalog_track_id(self) -> str | None:
        """Spotify track ID, given directly or parsed from ``spotify_url``."""
        return self.spotify_track_id or extract_spotify_track_id(self.spotify_url)

    @property
    def has_full_hints(self) -> bool:
        """True when both title and artist hints are present (free-text search is possible)."""
        return bool(self.hint_title and self.hint_artist)


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------
class IdentificationMatch(BaseModel):
    """Provider-specific block kept from a fingerprint identification."""

    model_config = ConfigDict(frozen=True)

    acrid: str | None = None
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    title: str | None = None
    artists: list[str] = Field(default_factory=list)
    album: str | None = None
    release_date: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_track(cls, track: dict[str, Any], acrid: str | None = None) -> IdentificationMatch:
        """Build the block from a raw ACRCloud track object.

        A missing ``score`` is an exact match (100).
        """
        raw_score = track.get("score")
        score = 100.0 if raw_score is None else float(raw_score)
        album = track.get("album") if isinstance(track.get("album"), dict) else {}
        return cls(
            acrid=acrid or track.get("acrid") or track.get("acr_id"),
            score=min(max(score / 100.0, 0.0), 1.0),
            title=track.get("name") or track.get("title"),
            artists=[
                a.get("name")
                for a in track.get("artists") or []
                if isinstance(a, dict) and a.get("name")
            ],
            album=album.get("name"),
            release_date=track.get("release_date"),
            raw=track,
        )


class _TrackFields(BaseModel):
    """Metadata shared by candidates and results."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    isrc: str | None = None
    duration_ms: int | None = None
    cover_image_url: str | None = None
    platform_links: dict[str, str] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    resolver_sources: list[str] = Field(default_factory=list)
    needs_manual_review: bool = False
    identification: IdentificationMatch | None = None

    @property
    def acrid(self) -> str | None:
        return self.identification.acrid if self.identification else None


class TrackCandidate(_TrackFields):
    """One source's (or a merged) answer to a resolution request."""


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
class ResolutionResult(_TrackFields):
    """Caller-facing outcome of a resolution.

    Either ``success`` is False with ``error`` set, or the track fields are
    populated.  ``persisted`` and ``caller_record_updated`` report the two
    best-effort writes separately; ``caller_record_updated`` is None when
    the request carried no ``smart_link_id``.
    """

    success: bool
    resolver_path: ResolverPath
    canonical_url: str | None = None
    canonical_platform: str | None = None
    track_resolution_id: str | None = None
    persisted: bool = False
    caller_record_updated: bool | None = None
    error: str | None = None

    @classmethod
    def from_candidate(
        cls,
        candidate: TrackCandidate,
        resolver_path: ResolverPath,
        **extra: Any,
    ) -> ResolutionResult:
        """Lift *candidate* into a successful result on *resolver_path*."""
        fields = {name: getattr(candidate, name) for name in _TrackFields.model_fields}
        fields.update(extra)
        return cls(success=True, resolver_path=resolver_path, **fields)

    @classmethod
    def failure(cls, error: str) -> ResolutionResult:
        """A ``none``-path result flagged for manual review."""
        return cls(
            success=False,
            resolver_path=ResolverPath.NONE,
            confidence=0.0,
            needs_manual_review=True,
            error=error,
        )


# ---------------------------------------------------------------------------
# Durable cache row
# ---------------------------------------------------------------------------
class CachedResolution(BaseModel):
    """A row of the ``track_resolutions`` table."""

    model_config = ConfigDict(frozen=True)

    id: str
    isrc: str | None = None
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    duration_ms: int | None = None
    cover_image_url: str | None = None
    spotify_url: str | None = None
    apple_music_url: str | None = None
    youtube_url: str | None = None
    youtube_music_url: str | None = None
    tidal_url: str | None = None
    deezer_url: str | None = None
    amazon_url: str | None = None
    soundcloud_url: str | None = None
    spotify_track_id: str | None = None
    apple_music_id: str | None = None
    acrid: str | None = None
    acrcloud_raw: dict[str, Any] | None = None
    resolver_sources: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    status: ResolutionStatus = ResolutionStatus.NEEDS_REVIEW
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def platform_links(self) -> dict[str, str]:
        links: dict[str, str] = {}
        for platform, column in PLATFORM_URL_COLUMNS.items():
            url = getattr(self, column)
            if url:
                links[platform] = url
        return links

    def to_candidate(self) -> TrackCandidate:
        """Rebuild the candidate this row was written from."""
        identification = None
        if self.acrcloud_raw:
            identification = IdentificationMatch.from_track(self.acrcloud_raw, acrid=self.acrid)
        elif self.acrid:
            identification = IdentificationMatch(acrid=self.acrid)
        return TrackCandidate(
            title=self.title,
            artist=self.artist,
            album=self.album,
            isrc=self.isrc,
            duration_ms=self.duration_ms,
            cover_image_url=self.cover_image_url,
            platform_links=self.platform_links,
            confidence=self.confidence,
            resolver_sources=list(self.resolver_sources),
            needs_manual_review=self.status == ResolutionStatus.NEEDS_REVIEW,
            identification=identification,
        )
