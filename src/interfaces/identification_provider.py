"""Abstract base class for fingerprint identification providers.

An identification provider maps whatever identifiers a request carries
(fingerprint ID, ISRC, source URL, or an "artist title" query) to a single
track with cross-platform links and a match score.  ACRCloud's
external-metadata API is the production implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.track import ResolutionRequest, TrackCandidate


class IIdentificationProvider(ABC):
    """Contract for the primary (fingerprint) identification source."""

    @abstractmethod
    async def identify(self, request: ResolutionRequest) -> TrackCandidate | None:
        """Identify the track referenced by *request*.

        Parameters
        ----------
        request:
            The resolution request.  Implementations pick the strongest
            identifier available and ignore the rest.

        Returns
        -------
        TrackCandidate or None
            The best match with ``confidence`` in ``[0, 1]`` and an
            ``identification`` block, or ``None`` when the request carries
            nothing to query or the provider found no match.

        Raises
        ------
        src.utils.errors.IdentificationError
            If the provider call fails (transport error, non-2xx status,
            unparseable body).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this provider, e.g. ``"acrcloud"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
