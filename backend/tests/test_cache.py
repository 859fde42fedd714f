import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import app.cache.redis as cache_module
from app.cache.redis import KEY_PREFIX, cache_get, cache_set


@pytest.fixture(autouse=True)
def reset_circuit_breaker():
    """Reset circuit breaker state before each test."""
    cache_module._circuit_open_until = 0.0
    cache_module._pool = None
    yield
    cache_module._circuit_open_until = 0.0
    cache_module._pool = None


@pytest.mark.asyncio
async def test_cache_get_returns_none_when_redis_unavailable():
    with patch("app.cache.redis._get_redis") as mock_get:
        mock_get.return_value.get = AsyncMock(side_effect=ConnectionError("refused"))
        result = await cache_get("geocode:nowhere")
    assert result is None
    assert cache_module._circuit_open_until > time.monotonic()


@pytest.mark.asyncio
async def test_cache_set_skips_when_redis_unavailable():
    with patch("app.cache.redis._get_redis") as mock_get:
        mock_get.return_value.setex = AsyncMock(side_effect=ConnectionError("refused"))
        await cache_set("geocode:key", {"city": "Toronto"}, ttl=60)
    assert cache_module._circuit_open_until > time.monotonic()


@pytest.mark.asyncio
async def test_cache_round_trip_uses_prefix_and_ttl():
    fake = MagicMock()
    fake.setex = AsyncMock()
    fake.get = AsyncMock(return_value='{"city": "Toronto"}')

    with patch("app.cache.redis._get_redis", return_value=fake):
        await cache_set("geocode:toronto", {"city": "Toronto"}, ttl=60)
        result = await cache_get("geocode:toronto")

    fake.setex.assert_awaited_once_with(KEY_PREFIX + "geocode:toronto", 60, '{"city": "Toronto"}')
    fake.get.assert_awaited_once_with(KEY_PREFIX + "geocode:toronto")
    assert result == {"city": "Toronto"}


@pytest.mark.asyncio
async def test_cache_set_without_ttl():
    fake = MagicMock()
    fake.set = AsyncMock()

    with patch("app.cache.redis._get_redis", return_value=fake):
        await cache_set("geocode:toronto", {"city": "Toronto"})

    fake.set.assert_awaited_once()


@pytest.mark.asyncio
async def test_cache_get_unreadable_entry():
    fake = MagicMock()
    fake.get = AsyncMock(return_value="not json")

    with patch("app.cache.redis._get_redis", return_value=fake):
        assert await cache_get("geocode:broken") is None
    assert cache_module._circuit_open_until == 0.0


@pytest.mark.asyncio
async def test_circuit_breaker_skips_after_failure():
    with patch("app.cache.redis._get_redis") as mock_get:
        mock_get.return_value.get = AsyncMock(side_effect=ConnectionError("refused"))
        await cache_get("trip:circuit")
        result = await cache_get("should:skip")

    assert result is None
    assert mock_get.return_value.get.await_count == 1


@pytest.mark.asyncio
async def test_circuit_breaker_resets_after_cooldown():
    cache_module._circuit_open_until = time.monotonic() - 1.0  # Already expired

    with patch("app.cache.redis._get_redis") as mock_get:
        mock_get.return_value.get = AsyncMock(return_value=None)
        result = await cache_get("after:cooldown")

    assert result is None
    mock_get.return_value.get.assert_awaited_once()


@pytest.mark.asyncio
async def test_cache_set_skipped_when_circuit_open():
    cache_module._circuit_open_until = time.monotonic() + 30.0

    with patch("app.cache.redis._get_redis") as mock_get:
        await cache_set("should:skip", {"data": "value"}, ttl=60)
    mock_get.assert_not_called()
