"""String similarity used to validate identified tracks against user hints.

A medium-confidence identification is only accepted when the title and
artist the provider returned look like what the user typed.  Both sides go
through :func:`normalize_for_match` first so that case, punctuation and
"feat." credits do not count against a match, then a normalized
Levenshtein ratio is computed with rapidfuzz.

All functions here are pure and deterministic.
"""

from __future__ import annotations

import re
from typing import Protocol

from rapidfuzz.distance import Levenshtein

# Featuring credits ("feat.", "(ft.", "featuring", a bare "feat") are dropped
# before comparison; word boundaries keep "left" or "often" intact.
_FEATURING_RE = re.compile(r"\(?\b(?:feat|ft|featuring)\b\.?\)?", re.IGNORECASE)
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


class _HasTitleArtist(Protocol):
    title: str | None
    artist: str | None


class _HasHints(Protocol):
    hint_title: str | None
    hint_artist: str | None


def normalize_for_match(text: str) -> str:
    """Lowercase, strip featuring credits and punctuation, collapse spaces.

    >>> normalize_for_match("  Strobe (feat. Someone)! ")
    'strobe someone'
    """
    normalized = text.lower()
    normalized = _FEATURING_RE.sub("", normalized)
    normalized = _NON_WORD_RE.sub("", normalized)
    normalized = _WHITESPACE_RE.sub(" ", normalized)
    return normalized.strip()


def string_similarity(a: str, b: str) -> float:
    """Return a similarity in ``[0.0, 1.0]`` between two strings.

    Computed on normalized input as ``(longer - distance) / longer`` where
    ``distance`` is the Levenshtein edit distance.  Identical strings score
    1.0; when exactly one side is empty the score is 0.0.  The measure is
    symmetric.
    """
    left = normalize_for_match(a)
    right = normalize_for_match(b)
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0

    longer = max(len(left), len(right))
    distance = Levenshtein.distance(left, right)
    return (longer - distance) / longer


def hint_similarity(
    candidate: _HasTitleArtist,
    request: _HasHints,
    title_weight: float = 0.6,
    artist_weight: float = 0.4,
) -> float:
    """Score how well *candidate* matches the hints on *request*.

    Parameters
    ----------
    candidate:
        Anything exposing ``title`` and ``artist`` (normally a
        :class:`~src.models.track.TrackCandidate`).
    request:
        Anything exposing ``hint_title`` and ``hint_artist``.
    title_weight, artist_weight:
        Weights of the two field scores.  Title dominates by default.

    Returns
    -------
    float
        1.0 when no hints were given.  A field whose hint or candidate
        value is missing contributes a neutral 1.0.
    """
    if not request.hint_title and not request.hint_artist:
        return 1.0

    title_score = 1.0
    artist_score = 1.0
    if request.hint_title and candidate.title:
        title_score = string_similarity(request.hint_title, candidate.title)
    if request.hint_artist and candidate.artist:
        artist_score = string_similarity(request.hint_artist, candidate.artist)

    total_weight = title_weight + artist_weight
    if total_weight <= 0:
        return 1.0
    return (title_score * title_weight + artist_score * artist_weight) / total_weight
