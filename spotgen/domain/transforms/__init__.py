"""Pure transformations over track sequences."""

from .core import (
    album_key,
    artist_key,
    deduplicate,
    entry_key,
    group_by,
    lastfm_key,
    order_by_lastfm,
    order_by_popularity,
    popularity_key,
    sort_descending,
)

__all__ = [
    "album_key",
    "artist_key",
    "deduplicate",
    "entry_key",
    "group_by",
    "lastfm_key",
    "order_by_lastfm",
    "order_by_popularity",
    "popularity_key",
    "sort_descending",
]
