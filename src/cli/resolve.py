# =============================================================================
# src/cli/resolve.py - CLI Resolve Command
# =============================================================================
#
# Resolves one track reference from the command line, bypassing the API
# server but using the same wiring (src.main.build_resolver), cache
# database and credentials.
#
# Typical usage:
#   python -m src.cli.resolve --isrc GBAYE0601498
#   python -m src.cli.resolve --spotify-url https://open.spotify.com/track/...
#   python -m src.cli.resolve --artist "Deadmau5" --title "Strobe" --json
#
# Exit codes: 0 when a track was resolved, 1 when the result is "none".
# --json (or --quiet) keeps logs on stderr at WARNING+ so stdout holds only
# the result.
# =============================================================================

"""Standalone CLI for resolving a single track reference.

Usage::

    python -m src.cli.resolve --acrid <fingerprint id>
    python -m src.cli.resolve --isrc <ISRC> --smart-link-id <id>
    python -m src.cli.resolve --artist <artist> --title <title> --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys

import structlog

from src.models.track import ResolutionRequest, ResolutionResult


def _suppress_logs() -> None:
    """Send structlog output to stderr at WARNING+ so stdout stays clean."""
    os.environ["LOG_LEVEL"] = "WARNING"
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    logging.getLogger().setLevel(logging.WARNING)


def request_from_args(args: argparse.Namespace) -> ResolutionRequest:
    """Build a :class:`ResolutionRequest` from parsed CLI arguments."""
    return ResolutionRequest(
        acrid=args.acrid,
        isrc=args.isrc,
        audio_url=args.audio_url,
        spotify_url=args.spotify_url,
        spotify_track_id=args.spotify_track_id,
        hint_title=args.title,
        hint_artist=args.artist,
        hint_album=args.album,
        smart_link_id=args.smart_link_id,
        force_refresh=args.force_refresh,
    )


def format_result(result: ResolutionResult) -> str:
    """Render *result* as a short human-readable report."""
    if not result.success:
        return (
            "No match (needs manual review)\n"
            f"  path:   {result.resolver_path.value}\n"
            f"  reason: {result.error}"
        )

    lines = [
        f"{result.artist or '?'} - {result.title or '?'}",
        f"  album:       {result.album or '-'}",
        f"  isrc:        {result.isrc or '-'}",
        f"  path:        {result.resolver_path.value}",
        f"  confidence:  {result.confidence:.2f}"
        + ("  (needs manual review)" if result.needs_manual_review else ""),
        f"  sources:     {', '.join(result.resolver_sources) or '-'}",
        f"  canonical:   {result.canonical_platform} {result.canonical_url or '(no link)'}",
    ]
    for platform, url in sorted(result.platform_links.items()):
        lines.append(f"    {platform:<14} {url}")
    if result.track_resolution_id:
        lines.append(f"  resolution:  {result.track_resolution_id}")
    if result.caller_record_updated is not None:
        lines.append(f"  smart link updated: {'yes' if result.caller_record_updated else 'no'}")
    return "\n".join(lines)


async def _run(request: ResolutionRequest, json_output: bool, db_path: str | None) -> int:
    """Resolve *request*, print the outcome, and return the exit code."""
    # Deferred so --quiet takes effect before any module-level loggers exist.
    from src.config import settings
    from src.main import build_resolver, initialize_stores

    components = build_resolver(settings, db_path=db_path)
    try:
        await initialize_stores(components)
        result = await components["pipeline"].resolve(request)
    finally:
        await components["http_client"].aclose()

    if json_output:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print(format_result(result))
    return 0 if result.success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.resolve",
        description=(
            "Resolve a track reference into canonical cross-platform streaming links."
        ),
    )
    ids = parser.add_argument_group("identifiers")
    ids.add_argument("--acrid", help="ACRCloud fingerprint ID.")
    ids.add_argument("--isrc", help="International Standard Recording Code.")
    ids.add_argument("--audio-url", dest="audio_url", help="URL or storage path of the audio.")
    ids.add_argument("--spotify-url", dest="spotify_url", help="Spotify track URL or URI.")
    ids.add_argument("--spotify-track-id", dest="spotify_track_id", help="Spotify track ID.")

    hints = parser.add_argument_group("hints")
    hints.add_argument("--title", help="Track title hint.")
    hints.add_argument("--artist", help="Artist name hint.")
    hints.add_argument("--album", help="Album name hint.")

    parser.add_argument("--smart-link-id", dest="smart_link_id", help="Smart link to update.")
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        dest="force_refresh",
        help="Skip the cache and query the providers.",
    )
    parser.add_argument("--db-path", dest="db_path", default=None, help="SQLite cache database.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the result as JSON.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output (implied by --json).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits 0 on a resolved track, 1 otherwise."""
    args = _build_parser().parse_args(argv)
    if args.quiet or args.json_output:
        _suppress_logs()

    request = request_from_args(args)
    exit_code = asyncio.run(_run(request, args.json_output, args.db_path))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
