"""Unit tests for the resolve CLI - src.cli.resolve."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.cli.resolve import _build_parser, _run, format_result, main, request_from_args
from src.models.track import ResolutionResult, ResolverPath, TrackCandidate


def _result(**overrides) -> ResolutionResult:
    candidate = TrackCandidate(
        title="Strobe",
        artist="deadmau5",
        isrc="USUS10900001",
        platform_links={
            "spotify": "https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P",
            "tidal": "https://listen.tidal.com/track/3075618",
        },
        confidence=0.92,
        resolver_sources=["acrcloud"],
    )
    extra = {
        "canonical_platform": "spotify",
        "canonical_url": "https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P",
        "track_resolution_id": "res-1",
        "persisted": True,
    }
    extra.update(overrides)
    return ResolutionResult.from_candidate(candidate, ResolverPath.ACRCLOUD_STRONG, **extra)


class TestArgs:
    def test_request_from_args(self) -> None:
        args = _build_parser().parse_args(
            [
                "--isrc", "USUS10900001",
                "--title", "Strobe",
                "--artist", "deadmau5",
                "--smart-link-id", "link-1",
                "--force-refresh",
            ]
        )
        request = request_from_args(args)

        assert request.isrc == "USUS10900001"
        assert request.hint_title == "Strobe"
        assert request.hint_artist == "deadmau5"
        assert request.smart_link_id == "link-1"
        assert request.force_refresh is True
        assert request.acrid is None

    def test_spotify_url_parsed(self) -> None:
        args = _build_parser().parse_args(
            ["--spotify-url", "https://open.spotify.com/track/2jKoVlU7VAmExKJ1Jh3w9P", "--json"]
        )
        assert args.json_output is True
        assert request_from_args(args).catalog_track_id == "2jKoVlU7VAmExKJ1Jh3w9P"


class TestFormatResult:
    def test_success(self) -> None:
        text = format_result(_result(caller_record_updated=True))

        assert text.splitlines()[0] == "deadmau5 - Strobe"
        assert "acrcloud_strong" in text
        assert "0.92" in text
        assert "tidal" in text
        assert "res-1" in text
        assert "smart link updated: yes" in text

    def test_no_smart_link_line_without_caller_record(self) -> None:
        assert "smart link updated" not in format_result(_result())

    def test_failure(self) -> None:
        text = format_result(ResolutionResult.failure("All resolvers failed"))
        assert "No match" in text
        assert "none" in text
        assert "All resolvers failed" in text


class TestRun:
    @staticmethod
    def _components(result: ResolutionResult) -> dict:
        pipeline = MagicMock()
        pipeline.resolve = AsyncMock(return_value=result)
        http_client = MagicMock()
        http_client.aclose = AsyncMock()
        return {"pipeline": pipeline, "http_client": http_client}

    @pytest.mark.asyncio
    async def test_json_output_and_exit_code(self, capsys) -> None:
        components = self._components(_result())
        with patch("src.main.build_resolver", return_value=components), patch(
            "src.main.initialize_stores", new=AsyncMock()
        ):
            code = await _run(request_from_args(_build_parser().parse_args(["--isrc", "X"])), True, None)

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["resolver_path"] == "acrcloud_strong"
        assert payload["canonical_platform"] == "spotify"
        components["http_client"].aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_match_exit_code(self, capsys) -> None:
        components = self._components(ResolutionResult.failure("All resolvers failed"))
        with patch("src.main.build_resolver", return_value=components), patch(
            "src.main.initialize_stores", new=AsyncMock()
        ):
            code = await _run(request_from_args(_build_parser().parse_args([])), False, None)

        assert code == 1
        assert "No match" in capsys.readouterr().out

    def test_main_exits_with_run_code(self) -> None:
        with patch("src.cli.resolve._run", new=AsyncMock(return_value=1)), pytest.raises(
            SystemExit
        ) as exc_info:
            main(["--isrc", "X"])
        assert exc_info.value.code == 1
