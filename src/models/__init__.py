"""Resolver domain models - re-exports all public model classes.

    - track.py - request, candidates, result and the durable cache row
"""

from __future__ import annotations

from src.models.track import (
    PLATFORM_URL_COLUMNS,
    CachedResolution,
    IdentificationMatch,
    ResolutionRequest,
    ResolutionResult,
    ResolutionStatus,
    ResolverPath,
    TrackCandidate,
)

__all__ = [
    "PLATFORM_URL_COLUMNS",
    "CachedResolution",
    "IdentificationMatch",
    "ResolutionRequest",
    "ResolutionResult",
    "ResolutionStatus",
    "ResolverPath",
    "TrackCandidate",
]
