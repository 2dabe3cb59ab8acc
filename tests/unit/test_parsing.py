"""Tests for the directive parser."""

from spotgen.domain.entities import (
    AlbumEntry,
    ArtistEntry,
    SimilarEntry,
    TopEntry,
    Track,
)
from spotgen.domain.parsing import parse_playlist


def types_of(parsed):
    return [type(entry) for entry in parsed.entries]


class TestDirectives:
    def test_order_and_group(self):
        parsed = parse_playlist("#ORDER BY Popularity\n#GROUP BY artist\n")

        assert parsed.ordering == "popularity"
        assert parsed.grouping == "artist"
        assert len(parsed.entries) == 0

    def test_sort_by_is_an_alias_and_last_one_wins(self):
        parsed = parse_playlist("#ORDER BY popularity\n#SORT BY lastfm")
        assert parsed.ordering == "lastfm"

    def test_unique_is_the_default(self):
        assert parse_playlist("Song - Artist").unique
        assert parse_playlist("#UNIQUE\nSong - Artist").unique

    def test_comments_and_header_are_ignored(self):
        parsed = parse_playlist("#EXTM3U\n## a comment\nSong - Artist")
        assert [track.entry for track in parsed.entries] == ["Song - Artist"]

    def test_unknown_directives_never_produce_entries(self):
        parsed = parse_playlist("#PLAYLIST Mine\n#FOO bar\n#ARTIST\nSong - Artist")
        assert types_of(parsed) == [Track]


class TestEntries:
    def test_entry_types_and_limits(self):
        parsed = parse_playlist(
            "\n".join([
                "#ARTIST5 Bruce Springsteen",
                "#ALBUM Born to Run",
                "#top10 rock",
                "#SIMILAR3 Thunder Road - Bruce Springsteen",
                "spotify:track:4uLU6hMCjMI75M1A2tKUQC",
                "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC",
                "Badlands - Bruce Springsteen",
            ])
        )

        assert types_of(parsed) == [
            ArtistEntry,
            AlbumEntry,
            TopEntry,
            SimilarEntry,
            Track,
            Track,
            Track,
        ]
        entries = list(parsed.entries)
        assert (entries[0].seed, entries[0].limit) == ("Bruce Springsteen", 5)
        assert entries[1].limit is None
        assert (entries[2].seed, entries[2].limit) == ("rock", 10)
        assert entries[3].seed == "Thunder Road - Bruce Springsteen"

    def test_blank_lines_and_crlf(self):
        parsed = parse_playlist("\r\n  First - A  \r\n\r\nSecond - B\r\n")
        assert [track.entry for track in parsed.entries] == ["First - A", "Second - B"]

    def test_empty_text(self):
        assert len(parse_playlist("").entries) == 0


class TestExtinf:
    def test_header_consumes_the_following_line(self):
        parsed = parse_playlist("#EXTINF:180,Song Title\n/music/song.mp3\nNext - Artist")

        assert [track.entry for track in parsed.entries] == [
            "Song Title",
            "Next - Artist",
        ]

    def test_following_directive_is_not_consumed(self):
        parsed = parse_playlist("#EXTINF:180,Song Title\n#ARTIST Band")
        assert types_of(parsed) == [Track, ArtistEntry]

    def test_empty_title_falls_back_to_following_line(self):
        parsed = parse_playlist("#EXTINF:-1,\nspotify:track:abc")
        assert [track.entry for track in parsed.entries] == ["spotify:track:abc"]

    def test_header_at_end_of_text(self):
        parsed = parse_playlist("#EXTINF:12.5,Last Song")
        assert [track.entry for track in parsed.entries] == ["Last Song"]

    def test_malformed_header_is_skipped(self):
        parsed = parse_playlist("#EXTINF:abc,Broken\nSong - Artist")
        assert [track.entry for track in parsed.entries] == ["Song - Artist"]
