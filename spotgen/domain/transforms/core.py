"""
Pure transformations over ordered track sequences.

These functions never mutate their input and never touch the network; the
Queue uses them once every track holds the metadata the transformation needs.
All of them are stable: elements that compare equal keep their relative order.
"""

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from toolz import concat, curry, groupby

from spotgen.config import get_logger

if TYPE_CHECKING:
    from spotgen.domain.entities.track import Track

logger = get_logger(__name__)

# === Deduplication ===


def deduplicate(tracks: Iterable["Track"]) -> list["Track"]:
    """Keep the first track of each similarity class.

    Two tracks are similar when they share a non-empty URI, or else when
    their display strings match ignoring case. Both keys come from
    Track.match_keys, the pair Track.similar_to compares.
    """
    seen_uris: set[str] = set()
    seen_names: set[str] = set()
    unique: list[Track] = []
    duplicates_removed = 0
    for track in tracks:
        uri, name = track.match_keys
        if (uri and uri in seen_uris) or name in seen_names:
            duplicates_removed += 1
            continue
        if uri:
            seen_uris.add(uri)
        seen_names.add(name)
        unique.append(track)

    if duplicates_removed:
        logger.debug(
            f"Removed {duplicates_removed} duplicate tracks",
            remaining=len(unique),
        )
    return unique


# === Ordering ===


@curry
def sort_descending(
    key_fn: Callable[["Track"], Any], tracks: Iterable["Track"]
) -> list["Track"]:
    """Stable descending sort.

    Key functions return -1 for unknown values, so unknown sorts last.
    """
    return sorted(tracks, key=key_fn, reverse=True)


def popularity_key(track: "Track") -> int:
    return track.popularity


def lastfm_key(track: "Track") -> int:
    return track.lastfm


order_by_popularity = sort_descending(popularity_key)
order_by_lastfm = sort_descending(lastfm_key)


# === Grouping ===


@curry
def group_by(
    key_fn: Callable[["Track"], str], tracks: Iterable["Track"]
) -> list["Track"]:
    """Cluster tracks sharing a key, in order of each key's first appearance.

    This is a stable group-by, not a sort: order within a group is kept.
    """
    return list(concat(groupby(key_fn, tracks).values()))


def album_key(track: "Track") -> str:
    return track.album.lower()


def artist_key(track: "Track") -> str:
    return track.artist.lower()


def entry_key(track: "Track") -> str:
    return track.entry.lower()
