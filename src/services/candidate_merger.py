"""Field-by-field merge of an identification candidate with a catalog candidate.

When both sources answer, the identification provider's metadata is
preferred (it is fingerprint based) and the catalog fills in the gaps.
Each field's rule is written out explicitly below instead of relying on
dict spreading, so a new field cannot silently pick the wrong side.
"""

from __future__ import annotations

from src.models.track import TrackCandidate


def _prefer(primary: object | None, fallback: object | None) -> object | None:
    return primary if primary not in (None, "") else fallback


def merge_candidates(
    identified: TrackCandidate,
    searched: TrackCandidate,
    ok_threshold: float,
) -> TrackCandidate:
    """Merge *identified* (primary) with *searched* (secondary).

    Parameters
    ----------
    identified:
        Candidate from fingerprint identification.
    searched:
        Candidate from catalog search.
    ok_threshold:
        Confidence below which a source is not trusted on its own.  The
        merge needs manual review when both sources are below it.

    Returns
    -------
    TrackCandidate
        Scalars from *identified* when present, otherwise from *searched*;
        platform links from both with *identified* winning per platform;
        the higher of the two confidences; sources concatenated
        identification first.
    """
    return TrackCandidate(
        title=_prefer(identified.title, searched.title),
        artist=_prefer(identified.artist, searched.artist),
        album=_prefer(identified.album, searched.album),
        isrc=_prefer(identified.isrc, searched.isrc),
        duration_ms=_prefer(identified.duration_ms, searched.duration_ms),
        cover_image_url=_prefer(identified.cover_image_url, searched.cover_image_url),
        platform_links={**searched.platform_links, **identified.platform_links},
        confidence=max(identified.confidence, searched.confidence),
        resolver_sources=[*identified.resolver_sources, *searched.resolver_sources],
        needs_manual_review=(
            identified.confidence < ok_threshold and searched.confidence < ok_threshold
        ),
        identification=identified.identification,
    )
