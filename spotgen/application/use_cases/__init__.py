"""Use cases exposed to the interfaces."""

from .generate_playlist import (
    GeneratePlaylistCommand,
    GeneratePlaylistResult,
    GeneratePlaylistUseCase,
    generate_playlist,
)

__all__ = [
    "GeneratePlaylistCommand",
    "GeneratePlaylistResult",
    "GeneratePlaylistUseCase",
    "generate_playlist",
]
