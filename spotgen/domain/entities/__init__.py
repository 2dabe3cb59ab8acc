"""Core domain entities of the resolution engine."""

from .track import (
    PlaycountInfo,
    ResolutionState,
    Track,
    TrackReference,
    is_link,
    is_uri,
)
from .queue import Element, Queue
from .entries import AlbumEntry, ArtistEntry, Entry, SimilarEntry, TopEntry
from .playlist import Grouping, Ordering, Playlist, PlaylistState

__all__ = [
    # Track entities
    "PlaycountInfo",
    "ResolutionState",
    "Track",
    "TrackReference",
    "is_link",
    "is_uri",
    # Composite entries
    "AlbumEntry",
    "ArtistEntry",
    "Entry",
    "SimilarEntry",
    "TopEntry",
    # Queue and playlist
    "Element",
    "Grouping",
    "Ordering",
    "Playlist",
    "PlaylistState",
    "Queue",
]
