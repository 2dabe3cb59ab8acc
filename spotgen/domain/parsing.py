"""Directive parser for playlist text.

The grammar is line oriented and permissive: no line ever makes parsing fail.
Unknown ``#`` directives are dropped, any other non-empty line is a track.

    #ORDER BY popularity        (or #SORT BY) ordering mode, last one wins
    #GROUP BY artist            grouping mode, last one wins
    #UNIQUE                     remove duplicates (the default)
    ## comment, #EXTM3U         ignored
    #ARTIST5 Bruce Springsteen  composite entries with an optional limit
    #ALBUM, #TOP, #SIMILAR
    #EXTINF:180,Title - Artist  extended M3U header; swallows the next line
    Title - Artist              a track, a spotify:track: URI or a track link
"""

from collections import deque
import re

from attrs import define, field

from spotgen.config import get_logger
from spotgen.domain.entities.entries import (
    AlbumEntry,
    ArtistEntry,
    Entry,
    SimilarEntry,
    TopEntry,
)
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.track import Track

logger = get_logger(__name__)

ORDER_PATTERN = re.compile(r"^#(?:SORT|ORDER)\s+BY\s+(.+)$", re.IGNORECASE)
GROUP_PATTERN = re.compile(r"^#GROUP\s+BY\s+(.+)$", re.IGNORECASE)
UNIQUE_PATTERN = re.compile(r"^#UNIQUE", re.IGNORECASE)
COMMENT_PATTERN = re.compile(r"^(?:##|#EXTM3U)", re.IGNORECASE)
ENTRY_PATTERN = re.compile(r"^#(ALBUM|ARTIST|TOP|SIMILAR)(\d*)\s+(.+)$", re.IGNORECASE)
EXTINF_PATTERN = re.compile(r"^#EXTINF:-?\d+(?:\.\d+)?,(.*)$", re.IGNORECASE)
EXTINF_PREFIX = re.compile(r"^#EXTINF", re.IGNORECASE)

ENTRY_TYPES: dict[str, type[Entry]] = {
    "ALBUM": AlbumEntry,
    "ARTIST": ArtistEntry,
    "TOP": TopEntry,
    "SIMILAR": SimilarEntry,
}


@define(slots=True)
class ParsedPlaylist:
    """Parser output: entries in order plus playlist configuration."""

    entries: Queue = field(factory=Queue)
    grouping: str | None = None
    ordering: str | None = None
    unique: bool = True


def parse_playlist(text: str) -> ParsedPlaylist:
    """Parse directive text.

    Args:
        text: Playlist text with any line ending style

    Returns:
        ParsedPlaylist with one entry per track line or composite directive
    """
    parsed = ParsedPlaylist()
    lines = deque(line.strip() for line in text.strip().splitlines())

    while lines:
        line = lines.popleft()

        if match := ORDER_PATTERN.match(line):
            parsed.ordering = match[1].strip().lower()
        elif match := GROUP_PATTERN.match(line):
            parsed.grouping = match[1].strip().lower()
        elif UNIQUE_PATTERN.match(line):
            parsed.unique = True
        elif COMMENT_PATTERN.match(line):
            continue
        elif match := ENTRY_PATTERN.match(line):
            entry_type = ENTRY_TYPES[match[1].upper()]
            limit = int(match[2]) if match[2] else None
            parsed.entries.add(entry_type(match[3], limit=limit))
        elif EXTINF_PREFIX.match(line):
            _parse_extinf(line, lines, parsed.entries)
        elif line.startswith("#"):
            logger.debug(f"Ignoring unrecognized directive: {line}")
        elif line:
            parsed.entries.add(Track(line))

    logger.debug(
        f"Parsed {len(parsed.entries)} entries",
        grouping=parsed.grouping,
        ordering=parsed.ordering,
    )
    return parsed


def _parse_extinf(line: str, lines: deque[str], entries: Queue) -> None:
    """Add the track described by an EXTINF header.

    The line following a well-formed header is the file path or link of the
    same track, so it is consumed unless it is another directive. The title
    from the header wins; the following line is only used when the title is
    empty.
    """
    match = EXTINF_PATTERN.match(line)
    if not match:
        logger.debug(f"Skipping malformed EXTINF line: {line}")
        return

    following = None
    if lines and not lines[0].startswith("#"):
        following = lines.popleft()

    title = match[1].strip() or following
    if title:
        entries.add(Track(title))
