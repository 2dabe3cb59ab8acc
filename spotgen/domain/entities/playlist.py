"""Playlist entity: directive text driven through the resolution pipeline.

The pipeline runs in a fixed sequence with no branching back:

    parsed -> resolved -> deduplicated -> ordered -> grouped -> rendered

Ordering and grouping may be no-ops depending on configuration but still
occupy their step.
"""

from enum import StrEnum, auto
from typing import TYPE_CHECKING

from attrs import define, field

from spotgen.config import get_logger
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.track import Track
from spotgen.domain.errors import PipelineError
from spotgen.domain.transforms.core import album_key, artist_key, entry_key

if TYPE_CHECKING:
    from spotgen.domain.protocols import ResolutionContext

logger = get_logger(__name__)


class PlaylistState(StrEnum):
    """Pipeline states, in order."""

    PARSED = auto()
    RESOLVED = auto()
    DEDUPLICATED = auto()
    ORDERED = auto()
    GROUPED = auto()
    RENDERED = auto()


PIPELINE = list(PlaylistState)


class Grouping(StrEnum):
    ARTIST = auto()
    ALBUM = auto()
    ENTRY = auto()


class Ordering(StrEnum):
    POPULARITY = auto()
    LASTFM = auto()


@define(slots=True, eq=False)
class Playlist:
    """A playlist under construction.

    Attributes:
        entries: Queue of entries, then of resolved tracks
        grouping: Grouping mode (artist, album, entry) or None
        ordering: Ordering mode (popularity, lastfm) or None
        unique: Whether to remove duplicates
        max_passes: Upper bound on resolve+flatten passes
        lastfm_user: User for personal Last.fm play counts
        state: Current pipeline state
    """

    entries: Queue = field(factory=Queue)
    grouping: str | None = field(default=None)
    ordering: str | None = field(default=None)
    unique: bool = field(default=True)
    max_passes: int = field(default=2)
    lastfm_user: str | None = field(default=None)
    state: PlaylistState = field(default=PlaylistState.PARSED, init=False)

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        grouping: str | None = None,
        ordering: str | None = None,
        unique: bool | None = None,
        max_passes: int = 2,
        lastfm_user: str | None = None,
    ) -> "Playlist":
        """Parse directive text; explicit arguments override directives."""
        from spotgen.domain.parsing import parse_playlist

        parsed = parse_playlist(text)
        return cls(
            entries=parsed.entries,
            grouping=grouping.lower() if grouping else parsed.grouping,
            ordering=ordering.lower() if ordering else parsed.ordering,
            unique=parsed.unique if unique is None else unique,
            max_passes=max_passes,
            lastfm_user=lastfm_user,
        )

    @property
    def tracks(self) -> list[Track]:
        return self.entries.tracks

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def dispatch(self, context: "ResolutionContext") -> str:
        """Run the whole pipeline.

        Returns:
            Newline-separated track URIs
        """
        await self.fetch_tracks(context)
        self.dedup()
        await self.order(context)
        await self.group(context)
        return self.render()

    async def fetch_tracks(self, context: "ResolutionContext") -> None:
        """Resolve and flatten until only tracks remain, up to max_passes."""
        self._check_next(PlaylistState.RESOLVED)

        entries = self.entries
        for pass_number in range(1, self.max_passes + 1):
            entries = (await entries.dispatch(context)).flatten()
            logger.debug(
                f"Resolve pass {pass_number} produced {len(entries)} elements"
            )
            if entries.is_resolved():
                break

        leftover = len(entries) - len(entries.tracks)
        if leftover:
            logger.warning(
                f"Dropping {leftover} entries still unresolved after "
                f"{self.max_passes} passes"
            )
        self.entries = Queue(entries.tracks)
        self.state = PlaylistState.RESOLVED

    def dedup(self) -> None:
        self._check_next(PlaylistState.DEDUPLICATED)
        if self.unique:
            self.entries = self.entries.dedup()
        self.state = PlaylistState.DEDUPLICATED

    async def order(self, context: "ResolutionContext") -> None:
        self._check_next(PlaylistState.ORDERED)
        if self.ordering == Ordering.POPULARITY:
            await self.refresh_tracks(context)
            self.entries = self.entries.order_by_popularity()
        elif self.ordering == Ordering.LASTFM:
            await self.fetch_lastfm(context)
            self.entries = self.entries.order_by_lastfm()
        elif self.ordering:
            logger.warning(f"Unknown ordering '{self.ordering}', keeping order")
        self.state = PlaylistState.ORDERED

    async def group(self, context: "ResolutionContext") -> None:
        self._check_next(PlaylistState.GROUPED)
        if self.grouping == Grouping.ARTIST:
            self.entries = self.entries.group(artist_key)
        elif self.grouping == Grouping.ALBUM:
            await self.refresh_tracks(context)
            self.entries = self.entries.group(album_key)
        elif self.grouping == Grouping.ENTRY:
            self.entries = self.entries.group(entry_key)
        elif self.grouping:
            logger.warning(f"Unknown grouping '{self.grouping}', keeping order")
        self.state = PlaylistState.GROUPED

    def render(self) -> str:
        """Log a trace line per track and return the URI listing."""
        self._check_next(PlaylistState.RENDERED)
        for track in self.tracks:
            logger.info(f"{track} | {track.popularity} ({track.lastfm})")
        self.state = PlaylistState.RENDERED
        return str(self)

    # ------------------------------------------------------------------
    # Metadata refresh
    # ------------------------------------------------------------------

    async def refresh_tracks(self, context: "ResolutionContext") -> None:
        """Upgrade every track to full metadata."""
        self.entries = (await self.entries.refresh(context)).flatten()

    async def fetch_lastfm(self, context: "ResolutionContext") -> None:
        """Fetch play counts for every track."""
        self.entries = await self.entries.fetch_lastfm(context, self.lastfm_user)

    def _check_next(self, target: PlaylistState) -> None:
        if PIPELINE.index(target) != PIPELINE.index(self.state) + 1:
            raise PipelineError(f"Cannot go from {self.state} to {target}")

    def __str__(self) -> str:
        return "\n".join(track.uri for track in self.tracks if track.uri)
