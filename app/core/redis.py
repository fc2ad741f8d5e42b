"""
Redis-backed JSON cache for facet lists.

Only whole-dataset facet lists are cached: the dataset is read-only between
loads, and the loader invalidates the entry after inserting rows. Filtered
pages and summaries never go through here. Every helper degrades to a no-op
when Redis is disabled or unreachable.
"""

import json
import logging
from typing import Any, Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_redis_client = None
_redis_unavailable = False


def get_redis_client():
    """
    Lazily connect once per process.
    Returns None when caching is disabled or the first connection failed.
    """
    global _redis_client, _redis_unavailable

    if not settings.REDIS_ENABLED or _redis_unavailable:
        return None

    if _redis_client is None:
        import redis

        try:
            client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2,
            )
            client.ping()
        except redis.RedisError as e:
            logger.warning(f"Redis unavailable, facet caching disabled: {e}")
            _redis_unavailable = True
            return None
        _redis_client = client
        logger.info(f"Redis connected at {settings.REDIS_URL}")

    return _redis_client


def cache_get(key: str) -> Optional[Any]:
    """Decoded JSON value for `key`, or None on a miss."""
    client = get_redis_client()
    if client is None:
        return None
    try:
        raw = client.get(key)
    except Exception as e:
        logger.warning(f"Redis read of {key} failed: {e}")
        return None
    return json.loads(raw) if raw else None


def cache_set(key: str, value: Any, ttl: int) -> bool:
    """Store `value` as JSON for `ttl` seconds. Returns True if cached."""
    client = get_redis_client()
    if client is None:
        return False
    try:
        client.setex(key, ttl, json.dumps(value))
    except Exception as e:
        logger.warning(f"Redis write of {key} failed: {e}")
        return False
    return True


def cache_delete(key: str) -> None:
    """Drop `key`, e.g. after the dataset was reloaded."""
    client = get_redis_client()
    if client is None:
        return
    try:
        client.delete(key)
    except Exception as e:
        logger.warning(f"Redis delete of {key} failed: {e}")
