"""Service connectors for external music platforms and APIs."""

from spotgen.config import get_logger
from spotgen.domain.protocols import ResolutionContext
from spotgen.infrastructure.connectors.lastfm import LastFMConnector
from spotgen.infrastructure.connectors.spotify import SpotifyConnector

logger = get_logger(__name__)


def create_resolution_context(lastfm_user: str | None = None) -> ResolutionContext:
    """Build a ResolutionContext wired to the real services.

    Args:
        lastfm_user: Last.fm user for personal play counts; defaults to the
            configured LASTFM_USERNAME

    Returns:
        ResolutionContext with fresh connector instances
    """
    lastfm = LastFMConnector()
    user = lastfm_user or lastfm.lastfm_username or None
    logger.debug("Creating resolution context", lastfm_user=user)
    return ResolutionContext(
        spotify=SpotifyConnector(),
        lastfm=lastfm,
        lastfm_user=user,
    )


# Define public API with explicit exports
__all__ = [
    "LastFMConnector",
    "SpotifyConnector",
    "create_resolution_context",
]
