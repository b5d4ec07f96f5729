"""Canonical platform selection for a resolved track.

The smart link needs one "primary" destination.  It is the first platform
in the configured priority order that has a link; when none does, the
default platform is reported so callers always get a platform name back.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

DEFAULT_PLATFORM_PRIORITY: tuple[str, ...] = (
    "spotify",
    "apple_music",
    "youtube_music",
    "youtube",
    "tidal",
    "deezer",
    "amazon",
    "soundcloud",
)

DEFAULT_PLATFORM = "spotify"


def select_canonical_platform(
    platform_links: Mapping[str, str | None],
    priority: Sequence[str] = DEFAULT_PLATFORM_PRIORITY,
    default: str = DEFAULT_PLATFORM,
) -> tuple[str, str | None]:
    """Pick the canonical ``(platform, url)`` pair from *platform_links*.

    Total and deterministic: the same links and priority always give the
    same answer, and an empty mapping yields ``(default, None)``.
    """
    for platform in priority:
        url = platform_links.get(platform)
        if url:
            return platform, url
    return default, None
