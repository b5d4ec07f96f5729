"""Shared pytest fixtures for the resolver test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.config.resolver_config import ResolverConfig
from src.interfaces.catalog_provider import ICatalogSearchProvider
from src.interfaces.identification_provider import IIdentificationProvider
from src.models.track import IdentificationMatch, TrackCandidate
from src.providers.store.sqlite_resolution_store import SQLiteResolutionStore
from src.providers.store.sqlite_smart_link_store import SQLiteSmartLinkStore

# ---------------------------------------------------------------------------
# Sample candidates
# ---------------------------------------------------------------------------


def _make_identified(confidence: float = 0.92, **overrides: Any) -> TrackCandidate:
    """Build an ACRCloud-style candidate for *Strobe* by deadmau5."""
    fields: dict[str, Any] = {
        "title": "Strobe",
        "artist": "deadmau5",
        "album": "For Lack of a Better Name",
        "isrc": "USUS10900001",
        "duration_ms": 637000,
        "platform_links": {
            "apple_music": "https://music.apple.com/us/album/strobe/1440743526?i=1440743532",
            "spotify": "https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P",
        },
        "confidence": confidence,
        "resolver_sources": ["acrcloud"],
        "identification": IdentificationMatch(
            acrid="acr-strobe-001",
            score=confidence,
            title="Strobe",
            artists=["deadmau5"],
            raw={"acrid": "acr-strobe-001", "score": round(confidence * 100)},
        ),
    }
    fields.update(overrides)
    return TrackCandidate(**fields)


def _make_searched(confidence: float = 0.70, **overrides: Any) -> TrackCandidate:
    """Build a Spotify-search-style candidate for *Strobe*."""
    fields: dict[str, Any] = {
        "title": "Strobe - Radio Edit",
        "artist": "deadmau5",
        "album": "Strobe",
        "isrc": "USUS10900001",
        "cover_image_url": "https://i.scdn.co/image/strobe",
        "platform_links": {"spotify": "https://open.spotify.com/track/0ve9wYVmSfTaPrEBNaXxIk"},
        "confidence": confidence,
        "resolver_sources": ["spotify_search"],
    }
    fields.update(overrides)
    return TrackCandidate(**fields)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def resolver_config() -> ResolverConfig:
    """Default thresholds with a short provider timeout for fast tests."""
    return ResolverConfig(provider_timeout_seconds=0.5)


# ---------------------------------------------------------------------------
# Mock provider fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_identification_provider() -> IIdentificationProvider:
    """Mock IIdentificationProvider that finds nothing by default.

    Override with ``mock.identify.return_value = make_identified()`` or
    ``mock.identify.side_effect = ...`` in individual tests.
    """
    mock = MagicMock(spec=IIdentificationProvider)
    mock.get_provider_name.return_value = "acrcloud"
    mock.is_available.return_value = True
    mock.identify = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def mock_catalog_provider() -> ICatalogSearchProvider:
    """Mock ICatalogSearchProvider that finds nothing by default."""
    mock = MagicMock(spec=ICatalogSearchProvider)
    mock.get_provider_name.return_value = "spotify"
    mock.is_available.return_value = True
    mock.find_track = AsyncMock(return_value=None)
    mock.get_track = AsyncMock(return_value=None)
    mock.search_by_isrc = AsyncMock(return_value=None)
    mock.search = AsyncMock(return_value=None)
    return mock


# ---------------------------------------------------------------------------
# SQLite stores on a temporary database
# ---------------------------------------------------------------------------


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "resolver.db"


@pytest_asyncio.fixture
async def resolution_store(db_path: Path) -> SQLiteResolutionStore:
    store = SQLiteResolutionStore(db_path=db_path)
    await store.initialize()
    return store


@pytest_asyncio.fixture
async def smart_link_store(db_path: Path) -> SQLiteSmartLinkStore:
    store = SQLiteSmartLinkStore(db_path=db_path)
    await store.initialize()
    return store


# ---------------------------------------------------------------------------
# Candidate factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_identified():
    """Factory fixture: ``make_identified(confidence=0.92, **overrides)``."""
    return _make_identified


@pytest.fixture
def make_searched():
    """Factory fixture: ``make_searched(confidence=0.70, **overrides)``."""
    return _make_searched
