"""Tests for the Playlist pipeline."""

import pytest

from spotgen.domain.entities import Playlist, PlaylistState, Track, TrackReference
from spotgen.domain.entities.track import PlaycountInfo
from spotgen.domain.errors import BatchResolutionError, PipelineError, ServiceError
from tests.fixtures.services import spotify_track


@pytest.fixture
def catalog(spotify, lastfm):
    """Catalog behind the end-to-end example text."""
    spotify.searches["Song One - Artist X"] = [
        spotify_track("one", "Song One", "Artist X", popularity=40)
    ]
    lastfm.top_tracks["Top Hits"] = [
        TrackReference("Hit A", "Band A"),
        TrackReference("Hit B", "Band B"),
        TrackReference("Hit C", "Band C"),
    ]
    spotify.searches["Hit A - Band A"] = [
        spotify_track("hita", "Hit A", "Band A", popularity=90)
    ]
    spotify.searches["Hit B - Band B"] = [
        spotify_track("hitb", "Hit B", "Band B", popularity=60)
    ]
    spotify.latency = 0.01
    return spotify


EXAMPLE = """#ORDER BY popularity
Song One - Artist X
Song One - Artist X
#TOP2 Top Hits
"""


class TestEndToEnd:
    async def test_example_playlist(self, context, catalog, lastfm):
        playlist = Playlist.from_text(EXAMPLE)

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:hita",
            "spotify:track:hitb",
            "spotify:track:one",
        ]
        assert playlist.state is PlaylistState.RENDERED
        assert ("get_top_tracks", "Top Hits") in lastfm.calls

    async def test_duplicates_kept_when_not_unique(self, context, catalog):
        playlist = Playlist.from_text(EXAMPLE, unique=False, ordering="none")

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:one",
            "spotify:track:one",
            "spotify:track:hita",
            "spotify:track:hitb",
        ]

    async def test_unresolved_tracks_are_left_out(self, context, catalog):
        playlist = Playlist.from_text("Song One - Artist X\nNo Such - Song")

        output = await playlist.dispatch(context)

        assert output == "spotify:track:one"
        assert len(playlist.tracks) == 2

    async def test_empty_text_renders_empty(self, context):
        assert await Playlist.from_text("").dispatch(context) == ""


class TestOrderingAndGrouping:
    async def test_popularity_order_refreshes_simplified_tracks(
        self, context, spotify
    ):
        spotify.album_tracks["Record"] = [
            spotify_track("a1", "Intro", "Band"),
            spotify_track("a2", "Single", "Band"),
        ]
        spotify.tracks["a1"] = spotify_track("a1", "Intro", "Band", popularity=5)
        spotify.tracks["a2"] = spotify_track("a2", "Single", "Band", popularity=75)
        playlist = Playlist.from_text("#ORDER BY popularity\n#ALBUM Record")

        output = await playlist.dispatch(context)

        assert output.splitlines() == ["spotify:track:a2", "spotify:track:a1"]

    async def test_lastfm_order_uses_personal_counts(self, context, spotify, lastfm):
        spotify.searches["A - X"] = [spotify_track("a", "A", "X")]
        spotify.searches["B - Y"] = [spotify_track("b", "B", "Y")]
        lastfm.playcounts[("X", "A")] = PlaycountInfo(1000, 1)
        lastfm.playcounts[("Y", "B")] = PlaycountInfo(10, 9)
        playlist = Playlist.from_text(
            "#ORDER BY lastfm\nA - X\nB - Y", lastfm_user="listener"
        )

        output = await playlist.dispatch(context)

        assert output.splitlines() == ["spotify:track:b", "spotify:track:a"]
        assert all(track.lastfm_user == "listener" for track in playlist.tracks)

    async def test_group_by_artist(self, context, spotify):
        for track_id, artist in [("a1", "A"), ("b1", "B"), ("a2", "a")]:
            spotify.searches[track_id] = [spotify_track(track_id, track_id, artist)]
        playlist = Playlist.from_text("#GROUP BY artist\na1\nb1\na2")

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:a1",
            "spotify:track:a2",
            "spotify:track:b1",
        ]

    async def test_group_by_album_refreshes_first(self, context, spotify):
        spotify.album_tracks["Record"] = [
            spotify_track("a1", "Intro", "Band", album="The Record"),
            spotify_track("a2", "Outro", "Band", album="The Record"),
        ]
        spotify.searches["Stray - Band"] = [
            spotify_track("stray", "Stray", "Band", album=None)
        ]
        spotify.searches["Late - Band"] = [
            spotify_track("late", "Late", "Band", album=None)
        ]
        spotify.tracks["stray"] = spotify_track(
            "stray", "Stray", "Band", album="Other", popularity=1
        )
        spotify.tracks["late"] = spotify_track(
            "late", "Late", "Band", album="The Record", popularity=1
        )
        playlist = Playlist.from_text(
            "#GROUP BY album\n#ALBUM Record\nStray - Band\nLate - Band"
        )

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:a1",
            "spotify:track:a2",
            "spotify:track:late",
            "spotify:track:stray",
        ]
        assert ("get_track", "late") in spotify.calls

    async def test_group_by_entry(self, context, spotify):
        spotify.artist_top_tracks["Band"] = [spotify_track("t1", "One", "Band")]
        spotify.artist_top_tracks["band"] = [
            spotify_track("t2", "Two", "Band"),
            spotify_track("t3", "Three", "Band"),
        ]
        spotify.searches["Solo - Other"] = [spotify_track("solo", "Solo", "Other")]
        playlist = Playlist.from_text(
            "#GROUP BY entry\n#ARTIST Band\nSolo - Other\n#ARTIST band"
        )

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:t1",
            "spotify:track:t2",
            "spotify:track:t3",
            "spotify:track:solo",
        ]

    async def test_override_beats_directive(self, context, catalog):
        playlist = Playlist.from_text(EXAMPLE, ordering="Popularity", grouping="ENTRY")

        assert playlist.ordering == "popularity"
        assert playlist.grouping == "entry"

    async def test_unknown_modes_keep_order(self, context, catalog):
        playlist = Playlist.from_text(
            "#ORDER BY rating\n#GROUP BY mood\nSong One - Artist X\nHit B - Band B\nHit A - Band A"
        )

        output = await playlist.dispatch(context)

        assert output.splitlines() == [
            "spotify:track:one",
            "spotify:track:hitb",
            "spotify:track:hita",
        ]


class TestPipelineStates:
    def test_steps_cannot_be_skipped(self):
        playlist = Playlist.from_text("Song - Artist")

        with pytest.raises(PipelineError):
            playlist.dedup()

    async def test_steps_cannot_be_repeated(self, context):
        playlist = Playlist.from_text("")
        await playlist.dispatch(context)

        with pytest.raises(PipelineError):
            playlist.render()

    async def test_states_advance_in_order(self, context):
        playlist = Playlist.from_text("")
        seen = [playlist.state]

        await playlist.fetch_tracks(context)
        seen.append(playlist.state)
        playlist.dedup()
        seen.append(playlist.state)
        await playlist.order(context)
        seen.append(playlist.state)
        await playlist.group(context)
        seen.append(playlist.state)
        playlist.render()
        seen.append(playlist.state)

        assert seen == list(PlaylistState)

    async def test_failed_resolve_stops_the_pipeline(self, context, spotify):
        spotify.failures["Song - Artist"] = ServiceError("spotify", "HTTP 503")
        playlist = Playlist.from_text("Song - Artist\nOther - Artist")

        with pytest.raises(BatchResolutionError):
            await playlist.dispatch(context)

        assert playlist.state is PlaylistState.PARSED

    async def test_pass_limit_drops_leftover_entries(self, context, spotify, lastfm):
        lastfm.similar_artists["Seed"] = ["Alike"]
        spotify.artist_top_tracks["Alike"] = [spotify_track("x", "X", "Alike")]
        playlist = Playlist.from_text("#SIMILAR Seed\nspotify:track:x", max_passes=1)
        spotify.tracks["x"] = spotify_track("x", "X", "Alike", popularity=3)

        await playlist.fetch_tracks(context)

        assert all(isinstance(track, Track) for track in playlist.entries)
        assert [track.uri for track in playlist.tracks] == ["spotify:track:x"]
