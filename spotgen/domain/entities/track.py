"""Track entity and related value objects.

A Track is the terminal element of the resolution engine: one concrete song,
created from a line of directive text and filled in with service metadata as
resolution progresses. Unlike the other entities, Track is mutable; each kind
of metadata is written by exactly one method, and the resolution state is
tracked explicitly instead of being inferred from which fields are set.
"""

from enum import StrEnum, auto
import re
from typing import TYPE_CHECKING, Any

from attrs import define, field

from spotgen.config import get_logger
from spotgen.domain.errors import NotFoundError

if TYPE_CHECKING:
    from spotgen.domain.protocols import ResolutionContext

logger = get_logger(__name__)

URI_PREFIX = "spotify:track:"
URI_PATTERN = re.compile(r"^spotify:track:", re.IGNORECASE)
LINK_PATTERN = re.compile(r"^https?://open\.spotify\.com/track/", re.IGNORECASE)


def is_uri(text: str) -> bool:
    """Whether ``text`` is a track URI like ``spotify:track:<id>``."""
    return URI_PATTERN.match(text) is not None


def is_link(text: str) -> bool:
    """Whether ``text`` is a web link like ``https://open.spotify.com/track/<id>``."""
    return LINK_PATTERN.match(text) is not None


class ResolutionState(StrEnum):
    """How much service metadata a Track holds."""

    UNRESOLVED = auto()
    SIMPLIFIED = auto()
    FULL = auto()
    NOT_FOUND = auto()


@define(frozen=True, slots=True)
class PlaycountInfo:
    """Play counts from the listening data service.

    None means "unknown", 0 means "zero plays".
    """

    global_playcount: int | None = None
    user_playcount: int | None = None

    @property
    def playcount(self) -> int:
        """Personal play count if known, else global, else -1."""
        if self.user_playcount is not None:
            return self.user_playcount
        if self.global_playcount is not None:
            return self.global_playcount
        return -1


@define(frozen=True, slots=True)
class TrackReference:
    """Artist/title pair returned by listing services that have no catalog ids."""

    title: str
    artist: str

    @property
    def query(self) -> str:
        return f"{self.title} - {self.artist}"


@define(slots=True, eq=False)
class Track:
    """One concrete song.

    Attributes:
        entry: Raw entry text the track was created from
        album_name: Album name override, set when expanded from an album
        response: Full track object (has popularity)
        response_simple: Simplified track object
        lastfm_response: Play counts, once fetched
        lastfm_user: User the play counts were fetched for
        state: Resolution state
    """

    entry: str = field(converter=str.strip)
    album_name: str | None = field(default=None)
    response: dict[str, Any] | None = field(default=None, init=False, repr=False)
    response_simple: dict[str, Any] | None = field(
        default=None, init=False, repr=False
    )
    lastfm_response: PlaycountInfo | None = field(default=None, init=False, repr=False)
    lastfm_user: str | None = field(default=None, init=False)
    state: ResolutionState = field(default=ResolutionState.UNRESOLVED, init=False)

    @classmethod
    def from_response(
        cls,
        entry: str,
        response: dict[str, Any],
        album_name: str | None = None,
    ) -> "Track":
        """Create a track pre-populated with a listing's metadata."""
        track = cls(entry, album_name=album_name)
        track.set_response(response)
        return track

    # ------------------------------------------------------------------
    # Metadata setters
    # ------------------------------------------------------------------

    def set_response(self, response: dict[str, Any]) -> None:
        """Store a track object, classifying it as full or simplified.

        Full objects carry a popularity score; simplified ones do not.
        """
        if "popularity" in response:
            self.set_full_response(response)
        else:
            self.set_simple_response(response)

    def set_full_response(self, response: dict[str, Any]) -> None:
        self.response = response
        self.state = ResolutionState.FULL

    def set_simple_response(self, response: dict[str, Any]) -> None:
        self.response_simple = response
        if self.state is not ResolutionState.FULL:
            self.state = ResolutionState.SIMPLIFIED

    def set_lastfm_response(
        self, response: PlaycountInfo, user: str | None = None
    ) -> None:
        self.lastfm_response = response
        self.lastfm_user = user

    def mark_not_found(self) -> None:
        if self.state is ResolutionState.UNRESOLVED:
            self.state = ResolutionState.NOT_FOUND

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    @property
    def is_resolved(self) -> bool:
        """Whether resolution has run to an outcome, including not found."""
        return self.state is not ResolutionState.UNRESOLVED

    async def resolve(self, context: "ResolutionContext") -> "Track":
        """Resolve the track unless it already holds metadata.

        URIs and web links are looked up by id; anything else is searched for
        and the first hit is taken.
        """
        if self.is_resolved:
            return self
        if self.id is not None:
            await self.fetch_track(context)
        else:
            await self.search_for_track(context)
        return self

    async def refresh(self, context: "ResolutionContext") -> "Track":
        """Make sure the track holds a full response."""
        if self.state is ResolutionState.SIMPLIFIED:
            await self.fetch_track(context)
        elif self.state is ResolutionState.UNRESOLVED:
            await self.resolve(context)
        return self

    async def fetch_track(self, context: "ResolutionContext") -> "Track":
        """Look the track up by id and store the full response."""
        track_id = self.id
        if track_id is None:
            self.mark_not_found()
            return self
        try:
            response = await context.spotify.get_track(track_id)
        except NotFoundError:
            logger.warning("No track with id {}", track_id, entry=self.entry)
            self.mark_not_found()
            return self
        self.set_full_response(response)
        return self

    async def search_for_track(self, context: "ResolutionContext") -> "Track":
        """Search for the entry text and keep the best match."""
        results = await context.spotify.search_tracks(self.entry, limit=1)
        if results:
            self.set_response(results[0])
        else:
            logger.warning(f"No search results for '{self.entry}'")
            self.mark_not_found()
        return self

    async def fetch_lastfm(
        self, context: "ResolutionContext", user: str | None = None
    ) -> "Track":
        """Fetch play counts for this track."""
        user = user or context.lastfm_user
        artist = self.artist
        title = self.title
        if not artist or not title:
            self.set_lastfm_response(PlaycountInfo(), user)
            return self
        info = await context.lastfm.get_playcount(artist, title, user)
        self.set_lastfm_response(info, user)
        return self

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------

    @property
    def metadata(self) -> dict[str, Any]:
        """The authoritative response: full if present, else simplified."""
        return self.response or self.response_simple or {}

    @property
    def id(self) -> str | None:
        """Catalog id, from metadata or from a URI/link entry."""
        for response in (self.response, self.response_simple):
            if response and response.get("id"):
                return response["id"]
        if is_uri(self.entry):
            return self.entry[len(URI_PREFIX) :] or None
        if is_link(self.entry):
            return self.entry.split("/")[4].split("?")[0] or None
        return None

    @property
    def title(self) -> str:
        return self.metadata.get("name") or ""

    @property
    def artist(self) -> str:
        """Main artist."""
        artists = self.metadata.get("artists") or []
        if artists and artists[0].get("name"):
            return artists[0]["name"].strip()
        return ""

    @property
    def artists(self) -> str:
        """All artists, separated by ``, ``."""
        return ", ".join(
            artist["name"].strip()
            for artist in self.metadata.get("artists") or []
            if artist.get("name")
        )

    @property
    def album(self) -> str:
        if self.album_name:
            return self.album_name
        album = self.metadata.get("album") or {}
        return album.get("name") or ""

    @property
    def duration(self) -> int:
        """Duration in ms, or -1."""
        return self.metadata.get("duration_ms") or -1

    @property
    def disc_number(self) -> int:
        return self.metadata.get("disc_number") or -1

    @property
    def track_number(self) -> int:
        return self.metadata.get("track_number") or -1

    @property
    def popularity(self) -> int:
        """Popularity score, or -1 if not available."""
        for response in (self.response, self.response_simple):
            if response and response.get("popularity") is not None:
                return response["popularity"]
        return -1

    @property
    def uri(self) -> str:
        """Track URI, or the empty string if not available."""
        return self.metadata.get("uri") or ""

    @property
    def lastfm_global(self) -> int:
        info = self.lastfm_response
        if info and info.global_playcount is not None:
            return info.global_playcount
        return -1

    @property
    def lastfm_personal(self) -> int:
        info = self.lastfm_response
        if info and info.user_playcount is not None:
            return info.user_playcount
        return -1

    @property
    def lastfm(self) -> int:
        """Personal play count if known, else global, else -1."""
        return self.lastfm_response.playcount if self.lastfm_response else -1

    @property
    def name(self) -> str:
        """``Title - Artist``, ``Title``, or the empty string."""
        title = self.title
        if not title:
            return ""
        artist = self.artist
        return f"{title} - {artist}" if artist else title

    def __str__(self) -> str:
        return self.name or self.entry

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def has_artist(self, artist: str) -> bool:
        """Whether any of the track's artists contains ``artist``."""
        needle = artist.strip().lower()
        return any(
            needle in candidate["name"].strip().lower()
            for candidate in self.metadata.get("artists") or []
            if candidate.get("name")
        )

    def equals(self, other: "Track") -> bool:
        """Same non-empty URI."""
        uri = self.uri
        return bool(uri) and uri == other.uri

    @property
    def match_keys(self) -> tuple[str, str]:
        """URI (possibly empty) and lower-cased display string.

        Two tracks are similar when they share a non-empty URI or the display
        string; deduplication keys on the same pair.
        """
        return self.uri, str(self).lower()

    def similar_to(self, other: "Track") -> bool:
        """Same URI, or else the same display string ignoring case."""
        if self is other:
            return True
        uri, name = self.match_keys
        other_uri, other_name = other.match_keys
        return (bool(uri) and uri == other_uri) or name == other_name
