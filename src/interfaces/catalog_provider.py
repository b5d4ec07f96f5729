"""Abstract base class for streaming catalog search providers.

The catalog provider is the resolver's secondary source: it is consulted
when fingerprint identification fails or is not confident enough.  The
Spotify Web API is the production implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.track import ResolutionRequest, TrackCandidate


class ICatalogSearchProvider(ABC):
    """Contract for the secondary (catalog search) source."""

    @abstractmethod
    async def find_track(self, request: ResolutionRequest) -> TrackCandidate | None:
        """Find the track referenced by *request* in the catalog.

        Implementations try their lookups strongest first (direct ID, then
        ISRC, then free-text hints) and return the first hit.

        Returns
        -------
        TrackCandidate or None
            ``None`` when nothing usable was supplied or nothing matched.
        """

    @abstractmethod
    async def get_track(self, track_id: str) -> TrackCandidate | None:
        """Fetch a single catalog track by its ID."""

    @abstractmethod
    async def search_by_isrc(self, isrc: str) -> TrackCandidate | None:
        """Return the first catalog track carrying *isrc*."""

    @abstractmethod
    async def search(self, artist: str, title: str) -> TrackCandidate | None:
        """Return the top free-text search hit for *artist* and *title*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this provider, e.g. ``"spotify"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
