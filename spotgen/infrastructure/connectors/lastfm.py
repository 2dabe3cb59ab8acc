"""Last.fm API integration.

This module provides the listening data service of the resolution engine
through the pylast library (https://github.com/pylast/pylast): tag charts,
similar tracks and artists, and global/personal play counts.

Last.fm listings carry artist/title pairs rather than catalog ids, so they are
returned as TrackReference values for the engine to search for.
"""

import asyncio
from collections.abc import Awaitable, Callable
import functools
from typing import ClassVar

from attrs import define, field
import backoff
import pylast

from spotgen.config import get_config, get_logger, resilient_operation
from spotgen.domain.entities.track import PlaycountInfo, TrackReference
from spotgen.domain.errors import ServiceError

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="lastfm")

SERVICE = "lastfm"

PYLAST_ERRORS = (pylast.NetworkError, pylast.MalformedResponseError, pylast.WSError)


# Last.fm error 6: invalid parameters, sent for unknown tracks and artists
NOT_FOUND_STATUS = "6"


def _is_not_found(error: Exception) -> bool:
    if not isinstance(error, pylast.WSError):
        return False
    return (
        str(error.get_id()) == NOT_FOUND_STATUS
        or "not found" in str(error).lower()
    )


def translate_lastfm_errors[**P, R](
    func: Callable[P, Awaitable[R]],
) -> Callable[P, Awaitable[R]]:
    """Re-raise pylast exceptions as domain service errors."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except PYLAST_ERRORS as e:
            raise ServiceError(SERVICE, str(e)) from e

    return wrapper


def retry_transient(func):
    """Retry pylast calls with jittered backoff; not-found errors give up at once."""
    return backoff.on_exception(
        backoff.expo,
        PYLAST_ERRORS,
        max_tries=get_config("LASTFM_API_RETRY_COUNT", 3),
        base=get_config("LASTFM_API_RETRY_BASE_DELAY", 2.0),
        max_value=get_config("LASTFM_API_RETRY_MAX_DELAY", 60.0),
        jitter=backoff.full_jitter,
        giveup=_is_not_found,
    )(func)


def _reference(track: pylast.Track) -> TrackReference:
    return TrackReference(
        title=track.get_title(),
        artist=track.get_artist().get_name(),
    )


@define(slots=True)
class LastFMConnector:
    """Read-only Last.fm API connector.

    Without an API key the connector is inert: play counts come back empty
    and listings come back as empty lists.
    """

    api_key: str | None = field(default=None)
    api_secret: str | None = field(default=None)
    lastfm_username: str | None = field(default=None)
    client: pylast.LastFMNetwork | None = field(default=None, repr=False)

    # Constants for API communication
    USER_AGENT: ClassVar[str] = "spotgen/0.1.0 (Playlist Generator)"

    def __attrs_post_init__(self) -> None:
        """Initialize Last.fm client with API credentials."""
        self.api_key = self.api_key or get_config("LASTFM_KEY") or None
        self.api_secret = self.api_secret or get_config("LASTFM_SECRET") or None
        self.lastfm_username = (
            self.lastfm_username or get_config("LASTFM_USERNAME") or None
        )

        if self.client is not None or not self.api_key:
            return

        logger.debug("Initializing Last.fm connector")
        self.client = pylast.LastFMNetwork(
            api_key=str(self.api_key),
            api_secret=str(self.api_secret or ""),
        )

        # Set user agent for API courtesy
        pylast.HEADERS["User-Agent"] = self.USER_AGENT

    @resilient_operation("get_lastfm_playcount")
    @translate_lastfm_errors
    @retry_transient
    async def get_playcount(
        self, artist: str, title: str, user: str | None = None
    ) -> PlaycountInfo:
        """Global play count, plus the user's when a user is known.

        Tracks Last.fm does not know come back as an empty PlaycountInfo.
        """
        if not self.client:
            return PlaycountInfo()

        user = user or self.lastfm_username
        track = self.client.get_track(artist, title)
        track.username = user

        try:
            return await asyncio.to_thread(self._read_playcounts, track, user)
        except pylast.WSError as e:
            if _is_not_found(e):
                logger.debug(f"Track not found on Last.fm: {artist} - {title}")
                return PlaycountInfo()
            raise

    @staticmethod
    def _read_playcounts(track: pylast.Track, user: str | None) -> PlaycountInfo:
        global_playcount = track.get_playcount()
        user_playcount = track.get_userplaycount() if user else None
        return PlaycountInfo(
            global_playcount=int(global_playcount)
            if global_playcount is not None
            else None,
            user_playcount=int(user_playcount) if user_playcount is not None else None,
        )

    @resilient_operation("get_lastfm_top_tracks")
    @translate_lastfm_errors
    @retry_transient
    async def get_top_tracks(
        self, tag: str, limit: int | None = None
    ) -> list[TrackReference]:
        """Top tracks of the tag's chart."""
        if not self.client:
            logger.warning("Last.fm client not initialized, no chart for '{}'", tag)
            return []

        items = await asyncio.to_thread(
            self.client.get_tag(tag).get_top_tracks, limit=limit
        )
        logger.debug(f"Retrieved {len(items)} top tracks for tag '{tag}'")
        return [_reference(item.item) for item in items]

    @resilient_operation("get_lastfm_similar_tracks")
    @translate_lastfm_errors
    @retry_transient
    async def get_similar_tracks(
        self, artist: str, title: str, limit: int | None = None
    ) -> list[TrackReference]:
        """Tracks similar to ``title`` by ``artist``, most similar first."""
        if not self.client:
            logger.warning(
                "Last.fm client not initialized, no similar tracks for '{} - {}'",
                title,
                artist,
            )
            return []

        try:
            items = await asyncio.to_thread(
                self.client.get_track(artist, title).get_similar, limit=limit
            )
        except pylast.WSError as e:
            if _is_not_found(e):
                logger.warning(f"Track not found on Last.fm: {title} - {artist}")
                return []
            raise
        return [_reference(item.item) for item in items]

    @resilient_operation("get_lastfm_similar_artists")
    @translate_lastfm_errors
    @retry_transient
    async def get_similar_artists(
        self, artist: str, limit: int | None = None
    ) -> list[str]:
        """Names of artists similar to ``artist``, most similar first."""
        if not self.client:
            logger.warning(
                "Last.fm client not initialized, no similar artists for '{}'", artist
            )
            return []

        try:
            items = await asyncio.to_thread(
                self.client.get_artist(artist).get_similar, limit=limit
            )
        except pylast.WSError as e:
            if _is_not_found(e):
                logger.warning(f"Artist not found on Last.fm: {artist}")
                return []
            raise
        return [item.item.get_name() for item in items]
