"""Tests for SpotifyConnector with a mocked spotipy client."""

from unittest.mock import AsyncMock, Mock

from loguru import logger
import pytest
import spotipy

from spotgen.domain.errors import NotFoundError, ServiceError
from spotgen.infrastructure.connectors.spotify import SpotifyConnector


@pytest.fixture
def client():
    return Mock(spec=spotipy.Spotify)


@pytest.fixture
def connector(client):
    return SpotifyConnector(client=client, market="SE", page_size=2)


def item(track_id, name="Song"):
    return {"id": track_id, "name": name, "uri": f"spotify:track:{track_id}"}


class TestTrackLookup:
    async def test_get_track(self, connector, client):
        client.track.return_value = {**item("abc"), "popularity": 12}

        track = await connector.get_track("abc")

        assert track["popularity"] == 12
        client.track.assert_called_once_with("abc", market="SE")

    async def test_404_becomes_not_found(self, connector, client):
        client.track.side_effect = spotipy.SpotifyException(404, -1, "not found")

        with pytest.raises(NotFoundError):
            await connector.get_track("missing")

        assert client.track.call_count == 1

    async def test_404_is_not_logged_as_an_error(self, connector, client):
        client.track.side_effect = spotipy.SpotifyException(404, -1, "not found")
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG")

        try:
            with pytest.raises(NotFoundError):
                await connector.get_track("missing")
        finally:
            logger.remove(handler_id)

        levels = {message.record["level"].name for message in messages}
        assert "ERROR" not in levels
        assert any("get_spotify_track" in message for message in messages)

    async def test_permanent_errors_are_not_retried(self, connector, client):
        client.track.side_effect = spotipy.SpotifyException(401, -1, "bad token")

        with pytest.raises(ServiceError) as exc_info:
            await connector.get_track("abc")

        assert exc_info.value.service == "spotify"
        assert client.track.call_count == 1

    async def test_transient_errors_are_retried(self, connector, client, monkeypatch):
        monkeypatch.setattr("asyncio.sleep", AsyncMock())
        client.track.side_effect = spotipy.SpotifyException(500, -1, "server error")

        with pytest.raises(ServiceError, match="HTTP 500"):
            await connector.get_track("abc")

        assert client.track.call_count == 3


class TestSearch:
    async def test_search_tracks(self, connector, client):
        client.search.return_value = {"tracks": {"items": [item("a"), item("b")]}}

        results = await connector.search_tracks("Song - Artist", limit=2)

        assert [result["id"] for result in results] == ["a", "b"]
        client.search.assert_called_once_with(
            q="Song - Artist", type="track", limit=2, market="SE"
        )

    async def test_empty_search(self, connector, client):
        client.search.return_value = {"tracks": {"items": []}}
        assert await connector.search_tracks("nothing") == []


class TestListings:
    async def test_artist_top_tracks(self, connector, client):
        client.search.return_value = {"artists": {"items": [{"id": "art", "name": "Band"}]}}
        client.artist_top_tracks.return_value = {
            "tracks": [item("t1"), item("t2"), item("t3")]
        }

        tracks = await connector.get_artist_top_tracks("Band", limit=2)

        assert [track["id"] for track in tracks] == ["t1", "t2"]
        client.artist_top_tracks.assert_called_once_with("art", country="SE")

    async def test_unknown_artist(self, connector, client):
        client.search.return_value = {"artists": {"items": []}}

        assert await connector.get_artist_top_tracks("Nobody") == []
        client.artist_top_tracks.assert_not_called()

    async def test_album_tracks_are_paginated_and_annotated(self, connector, client):
        client.search.return_value = {
            "albums": {"items": [{"id": "alb", "name": "Record", "uri": "spotify:album:alb"}]}
        }
        client.album_tracks.side_effect = [
            {"items": [item("a1"), item("a2")], "next": "page-2"},
            {"items": [item("a3")], "next": None},
        ]

        tracks = await connector.get_album_tracks("Record")

        assert [track["id"] for track in tracks] == ["a1", "a2", "a3"]
        assert all(track["album"]["name"] == "Record" for track in tracks)
        assert client.album_tracks.call_args_list[1].kwargs["offset"] == 2

    async def test_album_limit_stops_paging(self, connector, client):
        client.search.return_value = {
            "albums": {"items": [{"id": "alb", "name": "Record", "uri": "spotify:album:alb"}]}
        }
        client.album_tracks.return_value = {
            "items": [item("a1"), item("a2")],
            "next": "page-2",
        }

        tracks = await connector.get_album_tracks("Record", limit=1)

        assert [track["id"] for track in tracks] == ["a1"]
        assert client.album_tracks.call_count == 1
