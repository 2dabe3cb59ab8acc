"""Spotify catalog connector.

This module provides a connector for the Spotify Web API using the spotipy
library (https://spotipy.readthedocs.io/). It is the track metadata service of
the resolution engine: lookups by id, free-text search, artist top tracks and
album track listings.

Only catalog endpoints are used, so the client credentials flow is enough.
spotipy is synchronous; every call runs on a worker thread. Transient failures
are retried with backoff, and spotipy exceptions are translated into
ServiceError/NotFoundError before they leave this module.
"""

import asyncio
from collections.abc import Awaitable, Callable
import functools
from typing import Any

from attrs import define, field
import backoff
from dotenv import load_dotenv
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from spotgen.config import get_config, get_logger, resilient_operation
from spotgen.domain.errors import NotFoundError, ServiceError

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")

# spotipy falls back to SPOTIPY_CLIENT_ID/SECRET from the environment
load_dotenv()

SERVICE = "spotify"

# Status codes that will not change on retry
PERMANENT_STATUSES = frozenset({400, 401, 403, 404})


def _is_permanent(error: Exception) -> bool:
    return (
        isinstance(error, spotipy.SpotifyException)
        and error.http_status in PERMANENT_STATUSES
    )


def translate_spotify_errors[**P, R](
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Re-raise spotipy exceptions as domain service errors."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            if e.http_status == 404:
                raise NotFoundError(SERVICE, e.msg) from e
            raise ServiceError(SERVICE, f"HTTP {e.http_status}: {e.msg}") from e
        except SpotifyOauthError as e:
            raise ServiceError(SERVICE, f"authentication failed: {e}") from e

    return wrapper


def retry_transient(func):
    """Retry spotipy calls on transient failures with jittered backoff."""
    return backoff.on_exception(
        backoff.expo,
        spotipy.SpotifyException,
        max_tries=get_config("SPOTIFY_API_RETRY_COUNT", 3),
        max_value=get_config("SPOTIFY_API_RETRY_MAX_DELAY", 30.0),
        jitter=backoff.full_jitter,
        giveup=_is_permanent,
    )(func)


@define(slots=True)
class SpotifyConnector:
    """Thin async wrapper around spotipy.

    Attributes:
        client: spotipy client; built from configured credentials when omitted
        market: Market used for track relinking and availability
        page_size: Page size for paginated album listings (max 50)
    """

    client: spotipy.Spotify | None = field(default=None, repr=False)
    market: str = field(factory=lambda: get_config("SPOTIFY_MARKET", "US"))
    page_size: int = field(factory=lambda: get_config("SPOTIFY_API_PAGE_SIZE", 50))

    def __attrs_post_init__(self) -> None:
        """Initialize Spotify client with client credentials."""
        if self.client is not None:
            return
        logger.debug("Initializing Spotify connector")
        self.client = spotipy.Spotify(
            auth_manager=SpotifyClientCredentials(
                client_id=get_config("SPOTIFY_CLIENT_ID") or None,
                client_secret=get_config("SPOTIFY_CLIENT_SECRET") or None,
            ),
        )

    @resilient_operation("get_spotify_track", expected=(NotFoundError,))
    @translate_spotify_errors
    @retry_transient
    async def get_track(self, track_id: str) -> dict[str, Any]:
        """Fetch the full track object for a Spotify track ID."""
        logger.debug(f"Fetching track {track_id}")
        track = await asyncio.to_thread(self.client.track, track_id, market=self.market)
        if not track:
            raise NotFoundError(SERVICE, f"track {track_id} not found")
        return track

    @resilient_operation("search_spotify_tracks")
    @translate_spotify_errors
    @retry_transient
    async def search_tracks(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """Free-text track search, best match first.

        Args:
            query: Search text
            limit: Maximum number of results (max 50)

        Returns:
            Full track objects, possibly empty
        """
        logger.debug(f"Searching Spotify for: {query}")
        return await self._search(query, "track", limit)

    @resilient_operation("get_spotify_artist_top_tracks")
    @translate_spotify_errors
    @retry_transient
    async def get_artist_top_tracks(
        self, name: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Top tracks of the artist best matching ``name``.

        Returns:
            Full track objects in Spotify's order, or [] if no artist matches
        """
        artists = await self._search(name, "artist", 1)
        if not artists:
            logger.warning(f"No Spotify artist matches '{name}'")
            return []

        artist = artists[0]
        response = await asyncio.to_thread(
            self.client.artist_top_tracks, artist["id"], country=self.market
        )
        tracks = (response or {}).get("tracks", [])
        logger.debug(
            f"Retrieved {len(tracks)} top tracks for {artist.get('name', name)}"
        )
        return tracks if limit is None else tracks[:limit]

    @resilient_operation("get_spotify_album_tracks")
    @translate_spotify_errors
    @retry_transient
    async def get_album_tracks(
        self, name: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Tracks of the album best matching ``name``, in album order.

        Album listings return simplified track objects without album data,
        so each item is annotated with the album's id, name and uri.

        Returns:
            Simplified track objects, or [] if no album matches
        """
        albums = await self._search(name, "album", 1)
        if not albums:
            logger.warning(f"No Spotify album matches '{name}'")
            return []

        album = albums[0]
        album_info = {
            "id": album.get("id"),
            "name": album.get("name"),
            "uri": album.get("uri"),
        }

        items: list[dict[str, Any]] = []
        offset = 0
        while limit is None or len(items) < limit:
            page = await asyncio.to_thread(
                self.client.album_tracks,
                album["id"],
                limit=self.page_size,
                offset=offset,
                market=self.market,
            )
            if not page or not page.get("items"):
                break
            items.extend(page["items"])
            if not page.get("next"):
                break
            offset += len(page["items"])

        if limit is not None:
            items = items[:limit]
        logger.debug(f"Retrieved {len(items)} tracks of album {album_info['name']}")
        return [{**item, "album": album_info} for item in items]

    async def _search(self, query: str, kind: str, limit: int) -> list[dict[str, Any]]:
        results = await asyncio.to_thread(
            self.client.search,
            q=query,
            type=kind,
            limit=limit,
            market=self.market,
        )
        return (results or {}).get(f"{kind}s", {}).get("items", [])
