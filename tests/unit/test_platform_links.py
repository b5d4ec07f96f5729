"""Unit tests for platform link normalization."""

from __future__ import annotations

from src.utils.platform_links import (
    extract_apple_music_id,
    extract_spotify_track_id,
    normalize_platform_links,
    normalize_user_link,
)

SPOTIFY_ID = "2jKoVlU7VAmExKJ1Jh3w9P"


# ======================================================================
# ID extraction
# ======================================================================


class TestExtractIds:
    def test_spotify_from_url(self) -> None:
        url = f"https://open.spotify.com/track/{SPOTIFY_ID}?si=abc"
        assert extract_spotify_track_id(url) == SPOTIFY_ID

    def test_spotify_from_intl_url(self) -> None:
        url = f"https://open.spotify.com/intl-de/track/{SPOTIFY_ID}"
        assert extract_spotify_track_id(url) == SPOTIFY_ID

    def test_spotify_from_uri(self) -> None:
        assert extract_spotify_track_id(f"spotify:track:{SPOTIFY_ID}") == SPOTIFY_ID

    def test_spotify_none_for_other_urls(self) -> None:
        assert extract_spotify_track_id("https://open.spotify.com/album/xyz") is None
        assert extract_spotify_track_id(None) is None

    def test_apple_music_song_param_wins(self) -> None:
        url = "https://music.apple.com/us/album/strobe/1440743526?i=1440743532"
        assert extract_apple_music_id(url) == "1440743532"

    def test_apple_music_album_path(self) -> None:
        url = "https://music.apple.com/us/album/for-lack-of-a-better-name/1440743526"
        assert extract_apple_music_id(url) == "1440743526"

    def test_apple_music_none(self) -> None:
        assert extract_apple_music_id("https://example.com/?i=1") is None
        assert extract_apple_music_id("") is None


# ======================================================================
# normalize_user_link
# ======================================================================


class TestNormalizeUserLink:
    def test_blank_value(self) -> None:
        assert normalize_user_link("spotify", "  ") == (None, None)

    def test_spotify_uri_becomes_url(self) -> None:
        assert normalize_user_link("spotify", f"spotify:track:{SPOTIFY_ID}") == (
            f"https://open.spotify.com/track/{SPOTIFY_ID}",
            SPOTIFY_ID,
        )

    def test_spotify_bare_id(self) -> None:
        assert normalize_user_link("spotify", SPOTIFY_ID) == (
            f"https://open.spotify.com/track/{SPOTIFY_ID}",
            SPOTIFY_ID,
        )

    def test_spotify_url_kept(self) -> None:
        url = f"https://open.spotify.com/track/{SPOTIFY_ID}"
        assert normalize_user_link("spotify", url) == (url, SPOTIFY_ID)

    def test_apple_music_bare_id_has_no_url(self) -> None:
        assert normalize_user_link("applemusic", "1440743532") == (None, "1440743532")

    def test_youtube_short_link(self) -> None:
        assert normalize_user_link("youtube", "https://youtu.be/tKi9Z-f6qX4") == (
            "https://www.youtube.com/watch?v=tKi9Z-f6qX4",
            "tKi9Z-f6qX4",
        )

    def test_youtube_music_bare_id(self) -> None:
        assert normalize_user_link("youtube_music", "tKi9Z-f6qX4") == (
            "https://music.youtube.com/watch?v=tKi9Z-f6qX4",
            "tKi9Z-f6qX4",
        )

    def test_tidal_deep_link(self) -> None:
        assert normalize_user_link("tidal", "tidal://track/3075618") == (
            "https://listen.tidal.com/track/3075618",
            "3075618",
        )

    def test_deezer_numeric_id(self) -> None:
        assert normalize_user_link("deezer", "3135556") == (
            "https://www.deezer.com/track/3135556",
            "3135556",
        )

    def test_unknown_format_kept_without_id(self) -> None:
        assert normalize_user_link("soundcloud", "https://soundcloud.com/a/b") == (
            "https://soundcloud.com/a/b",
            None,
        )


# ======================================================================
# normalize_platform_links
# ======================================================================


class TestNormalizePlatformLinks:
    def test_none_input(self) -> None:
        result = normalize_platform_links(None)
        assert result.links == {}
        assert result.raw_ids == {}

    def test_builds_urls_and_maps_platform_names(self) -> None:
        metadata = {
            "spotify": [{"track": {"id": SPOTIFY_ID}}],
            "applemusic": [{"link": "https://music.apple.com/us/album/strobe/1440743526?i=1440743532"}],
            "deezer": {"track": {"id": "3135556"}},
            "youtube": [{"vid": "tKi9Z-f6qX4"}],
            "amazonmusic": [{"link": "https://music.amazon.com/albums/B00X?trackAsin=B01"}],
            "tidal": [{"track": {"id": 3075618}}],
        }
        result = normalize_platform_links(metadata)

        assert result.links == {
            "spotify": f"https://open.spotify.com/track/{SPOTIFY_ID}",
            "apple_music": "https://music.apple.com/us/album/strobe/1440743526?i=1440743532",
            "deezer": "https://www.deezer.com/track/3135556",
            "youtube": "https://www.youtube.com/watch?v=tKi9Z-f6qX4",
            "amazon": "https://music.amazon.com/albums/B00X?trackAsin=B01",
            "tidal": "https://listen.tidal.com/track/3075618",
        }
        assert result.raw_ids["spotify_id"] == SPOTIFY_ID
        assert result.raw_ids["apple_music_id"] == "1440743532"
        assert result.raw_ids["tidal_id"] == "3075618"

    def test_only_first_list_item_used(self) -> None:
        metadata = {"deezer": [{"track": {"id": "1"}}, {"track": {"id": "2"}}]}
        assert normalize_platform_links(metadata).links == {"deezer": "https://www.deezer.com/track/1"}

    def test_unknown_platforms_and_empty_entries_skipped(self) -> None:
        metadata = {"napster": [{"link": "https://napster.com/x"}], "spotify": [], "deezer": {}}
        assert normalize_platform_links(metadata).links == {}

    def test_isrc_and_upc_copied_to_raw_ids(self) -> None:
        result = normalize_platform_links({"isrc": "USUS10900001", "upc": "123456789012"})
        assert result.raw_ids == {"isrc": "USUS10900001", "upc": "123456789012"}

    def test_notes_record_each_link(self) -> None:
        result = normalize_platform_links({"spotify": [{"track": {"id": SPOTIFY_ID}}]})
        assert result.notes == ["spotify: built URL from track ID"]
