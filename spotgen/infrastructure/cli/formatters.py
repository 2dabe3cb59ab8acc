"""Output formats for generated playlists."""

import csv
from enum import StrEnum, auto
import io

from spotgen.domain.entities.track import Track

CSV_FIELDS = [
    "uri",
    "title",
    "artist",
    "album",
    "disc",
    "track",
    "duration_ms",
    "popularity",
    "lastfm",
]


class OutputFormat(StrEnum):
    URIS = auto()
    CSV = auto()


def _number(value: int) -> str:
    # -1 marks an unknown value
    return str(value) if value >= 0 else ""


def track_row(track: Track) -> list[str]:
    return [
        track.uri,
        track.title,
        track.artists,
        track.album,
        _number(track.disc_number),
        _number(track.track_number),
        _number(track.duration),
        _number(track.popularity),
        _number(track.lastfm),
    ]


def format_csv(tracks: list[Track]) -> str:
    """CSV listing with a header row; tracks without a URI are skipped."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_FIELDS)
    writer.writerows(track_row(track) for track in tracks if track.uri)
    return buffer.getvalue()


def format_uris(tracks: list[Track]) -> str:
    uris = [track.uri for track in tracks if track.uri]
    return "\n".join(uris) + "\n" if uris else ""


def format_tracks(tracks: list[Track], output_format: OutputFormat) -> str:
    if output_format is OutputFormat.CSV:
        return format_csv(tracks)
    return format_uris(tracks)
