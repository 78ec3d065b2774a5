import httpx
import pytest

from fandash.cache import KeyedCache, MemoryStore
from fandash.config import Settings

T0 = 1_700_000_000_000


class FakeClock:
    """Injectable epoch-ms clock."""

    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(store: MemoryStore, clock: FakeClock) -> KeyedCache:
    return KeyedCache(store, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        holodex_api_key="test-key",
        holodex_api_url="https://holodex.test/api/v2",
        channel_id="UC_TEST",
        twitter_username="moonahoshinova",
        nitter_instances=("https://nitter-a.test", "https://nitter-b.test"),
        cors_proxies=("https://proxy-a.test/?u=", "https://proxy-b.test/?u="),
        social_proxies=("https://social-proxy.test/?q=",),
        merch_shop_url="https://shop.test/en/collections/moona",
        merch_fetch_timeout=1.0,
        merch_overall_timeout=0.05,
        store_url="memory",
    )
