"""Abstract base classes for the resolver's durable stores.

Two independent stores are involved in a resolution:

- :class:`IResolutionStore` holds the ``track_resolutions`` cache, keyed
  by fingerprint ID, ISRC or catalog track ID.
- :class:`ISmartLinkStore` holds the caller's smart-link records, which get
  a back-reference to the resolution they were resolved to.

There is no transaction spanning the two.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.track import CachedResolution

# Keys a cached resolution can be looked up by, in lookup priority order.
LOOKUP_KEYS: tuple[str, ...] = ("acrid", "isrc", "spotify_track_id")


class IResolutionStore(ABC):
    """Contract for the resolution cache store."""

    @abstractmethod
    async def find_by_key(self, key: str, value: str) -> CachedResolution | None:
        """Return the highest-confidence row whose *key* column equals *value*.

        Parameters
        ----------
        key:
            One of :data:`LOOKUP_KEYS`.
        value:
            The identifier to match.

        Raises
        ------
        ValueError
            If *key* is not a lookup key.
        src.utils.errors.PersistenceError
            If the store cannot be read.
        """

    @abstractmethod
    async def find_by_id(self, resolution_id: str) -> CachedResolution | None:
        """Return the row with primary key *resolution_id*, if any."""

    @abstractmethod
    async def insert(self, row: dict[str, Any]) -> str:
        """Insert a new row built from *row* and return its generated ID."""

    @abstractmethod
    async def update(self, resolution_id: str, row: dict[str, Any]) -> None:
        """Overwrite the columns in *row* on the existing row *resolution_id*."""


class ISmartLinkStore(ABC):
    """Contract for the caller-record (smart link) store."""

    @abstractmethod
    async def attach_resolution(
        self,
        smart_link_id: str,
        track_resolution_id: str,
        resolved_isrc: str | None,
        resolver_confidence: float,
        resolver_sources: list[str],
    ) -> bool:
        """Point smart link *smart_link_id* at a resolution.

        Returns
        -------
        bool
            ``True`` if a record was updated, ``False`` if no smart link
            with that ID exists.

        Raises
        ------
        src.utils.errors.PersistenceError
            If the store cannot be written.
        """
