"""Composite playlist entries.

Each entry is created from one directive line and expands into an ordered
sub-queue of Tracks (or further entries) when resolved. Tracks created here
are pre-populated with whatever metadata the listing call returned, so they
stay dispatchable: a later pass or refresh can still upgrade them.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from attrs import define, field

from spotgen.config import get_logger
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.track import Track, TrackReference

if TYPE_CHECKING:
    from spotgen.domain.protocols import ResolutionContext

logger = get_logger(__name__)


@define(slots=True, eq=False)
class Entry(ABC):
    """Base class for composite entries.

    Attributes:
        seed: Artist name, album name, chart tag or seed track
        limit: Maximum number of results, None for unlimited
    """

    DIRECTIVE: ClassVar[str] = ""

    seed: str = field(converter=str.strip)
    limit: int | None = field(default=None)

    def truncate[T](self, items: list[T]) -> list[T]:
        if self.limit is None:
            return list(items)
        return list(items[: self.limit])

    @abstractmethod
    async def resolve(self, context: "ResolutionContext") -> Queue:
        """Expand into a sub-queue of tracks or further entries."""

    def _tracks_from_responses(
        self, items: list[dict[str, Any]], album_name: str | None = None
    ) -> Queue:
        return Queue([
            Track.from_response(self.seed, item, album_name=album_name)
            for item in self.truncate(items)
        ])

    def _tracks_from_references(self, references: list[TrackReference]) -> Queue:
        return Queue([Track(reference.query) for reference in self.truncate(references)])

    def __str__(self) -> str:
        return f"#{self.DIRECTIVE}{self.limit if self.limit is not None else ''} {self.seed}"


@define(slots=True, eq=False)
class ArtistEntry(Entry):
    """The artist's top tracks."""

    DIRECTIVE: ClassVar[str] = "ARTIST"

    async def resolve(self, context: "ResolutionContext") -> Queue:
        items = await context.spotify.get_artist_top_tracks(self.seed, self.limit)
        if not items:
            logger.warning(f"No top tracks for artist '{self.seed}'")
        return self._tracks_from_responses(items)


@define(slots=True, eq=False)
class AlbumEntry(Entry):
    """The album's tracks, in album order."""

    DIRECTIVE: ClassVar[str] = "ALBUM"

    async def resolve(self, context: "ResolutionContext") -> Queue:
        items = await context.spotify.get_album_tracks(self.seed, self.limit)
        if not items:
            logger.warning(f"No tracks for album '{self.seed}'")
            return Queue()
        album_name = (items[0].get("album") or {}).get("name")
        return self._tracks_from_responses(items, album_name=album_name)


@define(slots=True, eq=False)
class TopEntry(Entry):
    """Top chart tracks for a tag.

    Chart items carry no catalog ids, so each becomes a search-backed Track
    resolved on the next pass.
    """

    DIRECTIVE: ClassVar[str] = "TOP"

    async def resolve(self, context: "ResolutionContext") -> Queue:
        references = await context.lastfm.get_top_tracks(self.seed, self.limit)
        return self._tracks_from_references(references)


@define(slots=True, eq=False)
class SimilarEntry(Entry):
    """Tracks similar to a seed.

    A ``Title - Artist`` seed expands to similar tracks. A bare artist seed
    expands to the top track of each similar artist, as nested artist entries.
    """

    DIRECTIVE: ClassVar[str] = "SIMILAR"

    SEPARATOR: ClassVar[str] = " - "

    async def resolve(self, context: "ResolutionContext") -> Queue:
        if self.SEPARATOR in self.seed:
            title, artist = (
                part.strip() for part in self.seed.split(self.SEPARATOR, 1)
            )
            references = await context.lastfm.get_similar_tracks(
                artist, title, self.limit
            )
            return self._tracks_from_references(references)

        names = await context.lastfm.get_similar_artists(self.seed, self.limit)
        return Queue([ArtistEntry(name, limit=1) for name in self.truncate(names)])
