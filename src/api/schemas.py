"""Pydantic request/response schemas for the resolver API.

Request schemas end with "Request", response schemas with "Response".
The resolve endpoint answers with :class:`~src.models.track.ResolutionResult`
directly, so the HTTP body and the CLI ``--json`` output are identical.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from src.models.track import ResolutionRequest


class ResolveRequest(BaseModel):
    """Body of ``POST /api/v1/resolve``.  Every field is optional."""

    acrid: str | None = Field(default=None, max_length=128, description="ACRCloud fingerprint ID")
    isrc: str | None = Field(default=None, max_length=32)
    audio_url: str | None = Field(default=None, max_length=2048)
    spotify_url: str | None = Field(default=None, max_length=2048)
    spotify_track_id: str | None = Field(default=None, max_length=64)
    hint_title: str | None = Field(default=None, max_length=512)
    hint_artist: str | None = Field(default=None, max_length=512)
    hint_album: str | None = Field(default=None, max_length=512)
    smart_link_id: str | None = Field(default=None, max_length=128)
    force_refresh: bool = False

    def to_request(self) -> ResolutionRequest:
        return ResolutionRequest(**self.model_dump())


class ProviderStatus(BaseModel):
    """Availability of one external provider."""

    name: str
    role: str
    available: bool


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: list[ProviderStatus]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
