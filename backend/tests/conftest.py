import random
import time

import httpx
import pytest
import pytest_asyncio

import app.cache.redis as cache_module
import app.services.http as http_module
from app.main import app
from app.models.address import ResolvedAddress


class FixedRandom(random.Random):
    """Jitter pinned at 1.0 and the first option of every choice."""

    def uniform(self, a, b):
        return 1.0

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def fixed_rng():
    return FixedRandom()


@pytest.fixture(autouse=True)
def reset_http_client():
    http_module._client = None
    yield
    http_module._client = None


@pytest.fixture(autouse=True)
def cache_offline():
    """Keep tests away from a real Redis; test_cache resets this itself."""
    cache_module._circuit_open_until = time.monotonic() + 3600
    yield
    cache_module._circuit_open_until = 0.0


@pytest.fixture
def toronto():
    return ResolvedAddress(
        label="123 Main St, Toronto, ON, Canada",
        latitude=43.6532,
        longitude=-79.3832,
        country="Canada",
        region="Ontario",
        city="Toronto",
        postcode="M5V 2T6",
    )


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
