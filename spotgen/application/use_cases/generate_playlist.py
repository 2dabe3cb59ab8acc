"""GeneratePlaylist use case: directive text in, ordered track URIs out.

This is the produced surface of the resolution engine. It parses the text,
applies caller overrides, drives the playlist pipeline with the injected
services and returns the rendered listing along with the resolved tracks.
"""

import time

from attrs import define, field, validators

from spotgen.config import get_logger, settings
from spotgen.domain.entities.playlist import Playlist
from spotgen.domain.entities.track import Track
from spotgen.domain.protocols import ResolutionContext

logger = get_logger(__name__)


@define(frozen=True, slots=True)
class GeneratePlaylistCommand:
    """Everything needed to build one playlist.

    Overrides left as None keep whatever the directive text says.
    """

    text: str = field(validator=validators.instance_of(str))
    grouping: str | None = None
    ordering: str | None = None
    unique: bool | None = None
    lastfm_user: str | None = None
    max_passes: int = field(
        factory=lambda: settings.resolution.max_passes,
        validator=validators.ge(1),
    )


@define(frozen=True, slots=True)
class GeneratePlaylistResult:
    """Rendered listing plus the tracks it was rendered from."""

    output: str
    tracks: list[Track] = field(factory=list)
    entry_count: int = 0
    execution_time_ms: int = 0

    @property
    def uris(self) -> list[str]:
        return self.output.splitlines()


@define(slots=True)
class GeneratePlaylistUseCase:
    """Build a playlist with the services in ``context``."""

    context: ResolutionContext

    async def execute(self, command: GeneratePlaylistCommand) -> GeneratePlaylistResult:
        """Run the full pipeline.

        Raises:
            BatchResolutionError: An entry failed to resolve; nothing is rendered
        """
        start_time = time.time()
        playlist = Playlist.from_text(
            command.text,
            grouping=command.grouping,
            ordering=command.ordering,
            unique=command.unique,
            max_passes=command.max_passes,
            lastfm_user=command.lastfm_user or self.context.lastfm_user,
        )
        entry_count = len(playlist.entries)

        with logger.contextualize(
            operation="generate_playlist",
            entry_count=entry_count,
            grouping=playlist.grouping,
            ordering=playlist.ordering,
        ):
            logger.info(f"Generating playlist from {entry_count} entries")
            output = await playlist.dispatch(self.context)
            execution_time_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Generated playlist with {len(playlist.tracks)} tracks",
                execution_time_ms=execution_time_ms,
            )

        return GeneratePlaylistResult(
            output=output,
            tracks=playlist.tracks,
            entry_count=entry_count,
            execution_time_ms=execution_time_ms,
        )


async def generate_playlist(
    text: str,
    context: ResolutionContext,
    *,
    grouping: str | None = None,
    ordering: str | None = None,
    unique: bool | None = None,
) -> str:
    """Build a playlist and return its newline-separated track URIs."""
    command = GeneratePlaylistCommand(
        text=text, grouping=grouping, ordering=ordering, unique=unique
    )
    result = await GeneratePlaylistUseCase(context).execute(command)
    return result.output
