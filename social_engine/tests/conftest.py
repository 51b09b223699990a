import pytest

from social_engine.config import Settings
from social_engine.core.identity import StaticActorProvider
from social_engine.core.social_client import SocialMutationClient
from social_engine.tests.stubs.fake_backend import FakeBackend

ITEM_ID = "work-1"
ACTOR_ID = "user-1"


@pytest.fixture
def settings():
    """Settings isolated from the environment and the process cache."""
    return Settings(
        _env_file=None,
        backend_url="http://backend.test",
        backend_api_key="test-key",
        mutation_timeout=1.0,
        stats_batch_size=2,
        feed_page_size=5,
        follow_list_limit=3,
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def client(backend, settings):
    return SocialMutationClient(backend, settings=settings)


@pytest.fixture
def actor():
    return StaticActorProvider(ACTOR_ID)


@pytest.fixture
def anonymous():
    return StaticActorProvider()
