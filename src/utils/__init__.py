"""Utility modules for the smart-link track resolver.

- **errors** -- Domain exception hierarchy rooted at ResolverError.
- **logging** -- structlog setup with a console renderer in development
  and JSON in production.
- **similarity** -- Normalization and Levenshtein similarity used to
  validate identified tracks against user hints.
- **canonical** -- Priority-ordered canonical platform selection.
- **platform_links** -- Turns provider ``external_metadata`` and user
  supplied URIs/IDs into clean per-platform URLs.
"""

# -- Canonical platform selection ------------------------------------------
from src.utils.canonical import (
    DEFAULT_PLATFORM,
    DEFAULT_PLATFORM_PRIORITY,
    select_canonical_platform,
)

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    CatalogSearchError,
    ConfigurationError,
    IdentificationError,
    PersistenceError,
    ProviderUnavailableError,
    RateLimitError,
    ResolverError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Platform link normalization -------------------------------------------
from src.utils.platform_links import (
    NormalizedLinks,
    extract_apple_music_id,
    extract_spotify_track_id,
    normalize_platform_links,
    normalize_user_link,
)

# -- Hint validation -------------------------------------------------------
from src.utils.similarity import hint_similarity, normalize_for_match, string_similarity

__all__ = [
    "DEFAULT_PLATFORM",
    "DEFAULT_PLATFORM_PRIORITY",
    "CatalogSearchError",
    "ConfigurationError",
    "IdentificationError",
    "NormalizedLinks",
    "PersistenceError",
    "ProviderUnavailableError",
    "RateLimitError",
    "ResolverError",
    "configure_logging",
    "extract_apple_music_id",
    "extract_spotify_track_id",
    "get_logger",
    "hint_similarity",
    "normalize_for_match",
    "normalize_platform_links",
    "normalize_user_link",
    "select_canonical_platform",
    "string_similarity",
]
