"""Best-effort Redis cache for resolved addresses.

Any Redis failure opens a short circuit so a missing server costs one
timeout, not one per request.
"""

import json
import logging
import time

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "homeest:"

_pool: redis.Redis | None = None

_COOLDOWN_SECONDS = 30
_circuit_open_until: float = 0.0


def _circuit_is_open() -> bool:
    return time.monotonic() < _circuit_open_until


def _trip_circuit() -> None:
    global _circuit_open_until
    _circuit_open_until = time.monotonic() + _COOLDOWN_SECONDS


def _get_redis() -> redis.Redis:
    global _pool
    if _pool is None:
        _pool = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        )
    return _pool


async def cache_get(key: str) -> dict | None:
    """Look up a resolved-address document; an unreachable Redis reads as a miss."""
    if _circuit_is_open():
        return None
    try:
        value = await _get_redis().get(KEY_PREFIX + key)
    except Exception:
        logger.debug("cache get failed key=%s", key, exc_info=True)
        _trip_circuit()
        return None
    if value is None:
        return None
    try:
        return json.loads(value)
    except ValueError:
        logger.debug("cache entry unreadable key=%s", key)
        return None


async def cache_set(key: str, value: dict, ttl: int | None = None) -> None:
    """Store a document under KEY_PREFIX. Write failures only trip the circuit."""
    if _circuit_is_open():
        return
    serialized = json.dumps(value)
    try:
        if ttl:
            await _get_redis().setex(KEY_PREFIX + key, ttl, serialized)
        else:
            await _get_redis().set(KEY_PREFIX + key, serialized)
    except Exception:
        logger.debug("cache set failed key=%s", key, exc_info=True)
        _trip_circuit()
