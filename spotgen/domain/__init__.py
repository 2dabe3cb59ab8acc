"""Domain layer: entities, parsing and pure transforms of the playlist engine."""

from .entities import (
    AlbumEntry,
    ArtistEntry,
    Entry,
    Playlist,
    PlaycountInfo,
    Queue,
    SimilarEntry,
    TopEntry,
    Track,
    TrackReference,
)
from .errors import (
    BatchResolutionError,
    NotFoundError,
    PipelineError,
    ResolutionError,
    ServiceError,
    SpotgenError,
)
from .parsing import ParsedPlaylist, parse_playlist
from .protocols import ListeningDataService, ResolutionContext, TrackMetadataService

__all__ = [
    "AlbumEntry",
    "ArtistEntry",
    "BatchResolutionError",
    "Entry",
    "ListeningDataService",
    "NotFoundError",
    "ParsedPlaylist",
    "PipelineError",
    "PlaycountInfo",
    "Playlist",
    "Queue",
    "ResolutionContext",
    "ResolutionError",
    "ServiceError",
    "SimilarEntry",
    "SpotgenError",
    "TopEntry",
    "Track",
    "TrackMetadataService",
    "TrackReference",
    "parse_playlist",
]
