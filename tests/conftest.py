import pytest

from spotgen.domain.protocols import ResolutionContext
from tests.fixtures.services import FakeLastFMService, FakeSpotifyService


@pytest.fixture
def spotify():
    """Empty fake catalog; tests fill in what they need."""
    return FakeSpotifyService()


@pytest.fixture
def lastfm():
    """Empty fake listening data service."""
    return FakeLastFMService()


@pytest.fixture
def context(spotify, lastfm):
    """Resolution context wired to the fakes."""
    return ResolutionContext(spotify=spotify, lastfm=lastfm)
