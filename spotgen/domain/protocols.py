"""Service protocol definitions for the entry resolution engine.

These protocols describe the two external metadata services the engine
consumes. Concrete implementations live in spotgen.infrastructure.connectors;
tests substitute in-memory fakes. The services are passed around explicitly
through a ResolutionContext so no client state is process-wide.
"""

from typing import Any, Protocol, runtime_checkable

from attrs import define

from spotgen.domain.entities.track import PlaycountInfo, TrackReference


@runtime_checkable
class TrackMetadataService(Protocol):
    """Catalog service returning track JSON objects (Spotify shape)."""

    async def get_track(self, track_id: str) -> dict[str, Any]:
        """Fetch the full track object for an id.

        Raises:
            NotFoundError: No track has this id
            ServiceError: The service failed
        """
        ...

    async def search_tracks(self, query: str, limit: int = 1) -> list[dict[str, Any]]:
        """Free-text search, best match first. An empty list is a valid result."""
        ...

    async def get_artist_top_tracks(
        self, name: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Top tracks of the artist best matching ``name``."""
        ...

    async def get_album_tracks(
        self, name: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Tracks of the album best matching ``name``, in album order."""
        ...


@runtime_checkable
class ListeningDataService(Protocol):
    """Scrobbling service providing charts, similarity and play counts."""

    async def get_playcount(
        self, artist: str, title: str, user: str | None = None
    ) -> PlaycountInfo:
        """Global play count, and the personal one when ``user`` is given."""
        ...

    async def get_top_tracks(
        self, tag: str, limit: int | None = None
    ) -> list[TrackReference]:
        """Top chart tracks for a tag."""
        ...

    async def get_similar_tracks(
        self, artist: str, title: str, limit: int | None = None
    ) -> list[TrackReference]:
        """Tracks similar to the given one, most similar first."""
        ...

    async def get_similar_artists(
        self, artist: str, limit: int | None = None
    ) -> list[str]:
        """Names of artists similar to the given one, most similar first."""
        ...


@define(frozen=True, slots=True)
class ResolutionContext:
    """Everything an entry needs to resolve itself.

    Attributes:
        spotify: Track catalog service
        lastfm: Listening data service
        lastfm_user: Default Last.fm user for personal play counts
    """

    spotify: TrackMetadataService
    lastfm: ListeningDataService
    lastfm_user: str | None = None
