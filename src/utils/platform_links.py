"""Platform link normalization.

The identification provider returns ``external_metadata`` keyed by its own
platform names (``applemusic``, ``amazonmusic``, ...) where each entry is
either an object or a list of objects holding some mix of IDs, URIs and
URLs.  This module turns that into one clean URL per platform, keyed by
the resolver's platform names (``apple_music``, ``amazon``, ...), and keeps
the raw IDs it saw along the way.

It also converts a single user-supplied value (``spotify:track:...`` URI,
bare track ID, ``youtu.be`` short link, ``tidal://`` deep link) into a URL.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.utils.logging import get_logger

logger = get_logger(__name__)

# Provider platform names -> resolver platform names.
PLATFORM_ALIASES: dict[str, str] = {
    "spotify": "spotify",
    "applemusic": "apple_music",
    "apple_music": "apple_music",
    "youtube": "youtube",
    "youtubemusic": "youtube_music",
    "youtube_music": "youtube_music",
    "deezer": "deezer",
    "tidal": "tidal",
    "amazonmusic": "amazon",
    "amazon_music": "amazon",
    "amazon": "amazon",
    "soundcloud": "soundcloud",
}

_SPOTIFY_TRACK_RE = re.compile(r"spotify\.com/(?:intl-[a-z]+/)?track/([a-zA-Z0-9]+)")
_SPOTIFY_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9]{22}$")
_APPLE_MUSIC_ID_RE = re.compile(r"music\.apple\.com/.*/album/.*/(\d+)")
_APPLE_MUSIC_SONG_PARAM_RE = re.compile(r"[?&]i=(\d+)")
_YOUTUBE_V_PARAM_RE = re.compile(r"[?&]v=([a-zA-Z0-9_-]+)")
_YOUTU_BE_RE = re.compile(r"youtu\.be/([a-zA-Z0-9_-]+)")
_YOUTUBE_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")
_DEEZER_TRACK_RE = re.compile(r"deezer\.com/(?:[a-z]{2}/)?track/(\d+)")
_TIDAL_TRACK_RE = re.compile(r"/track/(\d+)")
_NUMERIC_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class NormalizedLinks:
    """Result of normalizing a provider's ``external_metadata`` block."""

    links: dict[str, str] = field(default_factory=dict)
    raw_ids: dict[str, str] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)


# ------------------------------------------------------------------
# ID extraction
# ------------------------------------------------------------------

def extract_spotify_track_id(value: str | None) -> str | None:
    """Return the Spotify track ID from a URL or ``spotify:track:`` URI."""
    if not value:
        return None
    value = value.strip()
    if value.startswith("spotify:track:"):
        return value.split(":", 2)[2] or None
    match = _SPOTIFY_TRACK_RE.search(value)
    return match.group(1) if match else None


def extract_apple_music_id(value: str | None) -> str | None:
    """Return the trailing numeric ID from an Apple Music album/song URL.

    A ``?i=<song id>`` query parameter wins over the album path segment.
    """
    if not value:
        return None
    song = _APPLE_MUSIC_SONG_PARAM_RE.search(value)
    if song and "music.apple.com" in value:
        return song.group(1)
    match = _APPLE_MUSIC_ID_RE.search(value)
    return match.group(1) if match else None


def _extract_youtube_video_id(value: str) -> str | None:
    if "youtube.com/watch" in value:
        match = _YOUTUBE_V_PARAM_RE.search(value)
        return match.group(1) if match else None
    if "youtu.be/" in value:
        match = _YOUTU_BE_RE.search(value)
        return match.group(1) if match else None
    if _YOUTUBE_BARE_ID_RE.match(value):
        return value
    return None


# ------------------------------------------------------------------
# Single-value normalization
# ------------------------------------------------------------------

def normalize_user_link(platform: str, value: str | None) -> tuple[str | None, str | None]:
    """Convert a URI, bare ID or partial URL into ``(url, track_id)``.

    Unknown formats are kept as-is with no ID.  An Apple Music bare ID
    cannot be turned into a URL (the storefront and album are missing), so
    it comes back as ``(None, id)``.
    """
    if not value or not value.strip():
        return None, None
    value = value.strip()
    platform = PLATFORM_ALIASES.get(platform, platform)

    if platform == "spotify":
        track_id = extract_spotify_track_id(value)
        if track_id:
            if value.startswith("spotify:"):
                return f"https://open.spotify.com/track/{track_id}", track_id
            return value, track_id
        if _SPOTIFY_BARE_ID_RE.match(value):
            return f"https://open.spotify.com/track/{value}", value
        logger.debug("unrecognized_link_format", platform=platform, value=value)
        return value, None

    if platform == "apple_music":
        if "music.apple.com" in value:
            return value, extract_apple_music_id(value)
        if _NUMERIC_RE.match(value):
            return None, value
        return value, None

    if platform == "deezer":
        match = _DEEZER_TRACK_RE.search(value)
        if match:
            return value, match.group(1)
        if _NUMERIC_RE.match(value):
            return f"https://www.deezer.com/track/{value}", value
        return value, None

    if platform in ("youtube", "youtube_music"):
        video_id = _extract_youtube_video_id(value)
        if not video_id:
            return value, None
        host = "music.youtube.com" if platform == "youtube_music" else "www.youtube.com"
        return f"https://{host}/watch?v={video_id}", video_id

    if platform == "tidal":
        if value.startswith("tidal://track/"):
            track_id = value[len("tidal://track/"):].split("/", 1)[0]
            return f"https://listen.tidal.com/track/{track_id}", track_id
        if "tidal.com/" in value:
            match = _TIDAL_TRACK_RE.search(value)
            return value, match.group(1) if match else None
        if _NUMERIC_RE.match(value):
            return f"https://listen.tidal.com/track/{value}", value
        return value, None

    return value, None


# ------------------------------------------------------------------
# external_metadata normalization
# ------------------------------------------------------------------

def _first_item(entry: Any) -> dict[str, Any] | None:
    if isinstance(entry, list):
        entry = entry[0] if entry else None
    return entry if isinstance(entry, dict) else None


def _as_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _link_of(item: dict[str, Any]) -> str | None:
    return _as_str(item.get("link")) or _as_str(item.get("url"))


def _spotify(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
    track = item.get("track") if isinstance(item.get("track"), dict) else {}
    tracks = item.get("tracks") if isinstance(item.get("tracks"), list) else []
    track_id = (
        _as_str(track.get("id"))
        or (_as_str(tracks[0].get("id")) if tracks and isinstance(tracks[0], dict) else None)
        or _as_str(item.get("id"))
    )
    if track_id:
        return f"https://open.spotify.com/track/{track_id}", track_id, "spotify: built URL from track ID"
    external = track.get("external_urls") if isinstance(track.get("external_urls"), dict) else {}
    url, track_id = normalize_user_link("spotify", _as_str(external.get("spotify")) or _link_of(item))
    return url, track_id, "spotify: used provider URL"


def _apple_music(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
    url = _link_of(item)
    track_id = _as_str(item.get("id")) or extract_apple_music_id(url)
    if url:
        return url, track_id, "apple_music: used provider URL"
    return None, track_id, "apple_music: stored ID, no URL available"


def _deezer(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
    track = item.get("track") if isinstance(item.get("track"), dict) else {}
    track_id = _as_str(track.get("id")) or _as_str(item.get("id"))
    if track_id:
        return f"https://www.deezer.com/track/{track_id}", track_id, "deezer: built URL from track ID"
    url, track_id = normalize_user_link("deezer", _link_of(item))
    return url, track_id, "deezer: used provider URL"


def _youtube_factory(platform: str) -> Callable[[dict[str, Any]], tuple[str | None, str | None, str]]:
    host = "music.youtube.com" if platform == "youtube_music" else "www.youtube.com"

    def _youtube(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
        video_id = _as_str(item.get("vid")) or _as_str(item.get("id"))
        if video_id:
            return f"https://{host}/watch?v={video_id}", video_id, f"{platform}: built URL from video ID"
        url, video_id = normalize_user_link(platform, _link_of(item))
        return url, video_id, f"{platform}: used provider URL"

    return _youtube


def _tidal(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
    track = item.get("track") if isinstance(item.get("track"), dict) else {}
    track_id = _as_str(track.get("id")) or _as_str(item.get("id"))
    if track_id:
        return f"https://listen.tidal.com/track/{track_id}", track_id, "tidal: built URL from track ID"
    url, track_id = normalize_user_link("tidal", _link_of(item))
    return url, track_id, "tidal: used provider URL"


def _link_only(platform: str) -> Callable[[dict[str, Any]], tuple[str | None, str | None, str]]:
    def _extract(item: dict[str, Any]) -> tuple[str | None, str | None, str]:
        url = _link_of(item) or _as_str(item.get("permalink_url"))
        return url, _as_str(item.get("id")), f"{platform}: used provider URL"

    return _extract


_EXTRACTORS: dict[str, Callable[[dict[str, Any]], tuple[str | None, str | None, str]]] = {
    "spotify": _spotify,
    "apple_music": _apple_music,
    "deezer": _deezer,
    "youtube": _youtube_factory("youtube"),
    "youtube_music": _youtube_factory("youtube_music"),
    "tidal": _tidal,
    "amazon": _link_only("amazon"),
    "soundcloud": _link_only("soundcloud"),
}


def normalize_platform_links(external_metadata: dict[str, Any] | None) -> NormalizedLinks:
    """Normalize an identification provider's ``external_metadata`` block.

    Parameters
    ----------
    external_metadata:
        Mapping of provider platform name to an object or a list of
        objects.  Only the first object of a list is used.  Top-level
        ``isrc`` / ``upc`` keys are copied into ``raw_ids``.

    Returns
    -------
    NormalizedLinks
        ``links`` keyed by resolver platform name; only non-empty URLs are
        kept.  ``raw_ids`` holds ``<platform>_id`` entries plus ISRC/UPC.
    """
    result = NormalizedLinks()
    if not isinstance(external_metadata, dict):
        return result

    for provider_key, entry in external_metadata.items():
        platform = PLATFORM_ALIASES.get(provider_key)
        extractor = _EXTRACTORS.get(platform) if platform else None
        item = _first_item(entry)
        if extractor is None or item is None:
            continue

        url, platform_id, note = extractor(item)
        if url and platform not in result.links:
            result.links[platform] = url
            result.notes.append(note)
        if platform_id and f"{platform}_id" not in result.raw_ids:
            result.raw_ids[f"{platform}_id"] = platform_id

    for key in ("isrc", "upc"):
        value = _as_str(external_metadata.get(key))
        if value:
            result.raw_ids[key] = value

    return result
