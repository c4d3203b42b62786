"""Redis-backed cache for per-assistant chat context.

Every chat turn needs the assistant row and its whole knowledge corpus.
Both are cached for a few minutes so a busy session does not hit Postgres
on every message. When Redis is disabled or unreachable there is no cache
and callers read the store directly.
"""
import json
import redis
from datetime import timedelta
from typing import Any, Optional

from eduassist.core.config import settings
from eduassist.core.logging import get_logger

logger = get_logger(__name__)

_client: Optional[redis.Redis] = None
_cache: Optional["CacheManager"] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Pooled client built from settings, or None when Redis is off or down.

    A failed ping is not remembered; the next call tries again.
    """
    global _client

    if not settings.redis_enabled:
        return None
    if _client is not None:
        return _client

    pool = redis.ConnectionPool(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password,
        decode_responses=True,
        max_connections=20,
        socket_connect_timeout=2,
        socket_timeout=2,
    )
    client = redis.Redis(connection_pool=pool)
    try:
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis at {settings.redis_host}:{settings.redis_port} unavailable, context cache off: {e}")
        pool.disconnect()
        return None

    logger.info(f"Connected to Redis at {settings.redis_host}:{settings.redis_port}")
    _client = client
    return _client


class CacheManager:
    """JSON values under a key prefix with a default TTL.

    Redis errors are logged and reported as a miss (get) or False
    (set/delete); the cache never fails a request.

    Example:
        >>> cache = CacheManager(redis_client, ttl_minutes=10)
        >>> cache.set("assistant_context:a1", {"assistant": {...}, "knowledge": []})
        >>> cache.get("assistant_context:a1")
    """

    def __init__(self, redis_client: redis.Redis, ttl_minutes: int = 10, key_prefix: str = "eduassist:"):
        self.redis = redis_client
        self.ttl = timedelta(minutes=ttl_minutes)
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return self.key_prefix + key

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.redis.get(self._key(key))
        except redis.RedisError as e:
            logger.error(f"Cache read failed for {key}: {e}")
            return None

        if raw is None:
            logger.debug(f"Cache miss: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_minutes: Optional[int] = None) -> bool:
        ttl = timedelta(minutes=ttl_minutes) if ttl_minutes else self.ttl
        try:
            self.redis.setex(self._key(key), ttl, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.error(f"Cache write failed for {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        try:
            return bool(self.redis.delete(self._key(key)))
        except redis.RedisError as e:
            logger.error(f"Cache delete failed for {key}: {e}")
            return False


def get_cache() -> Optional[CacheManager]:
    """Process-wide context cache, or None when Redis is not available."""
    global _cache

    if _cache is None:
        client = get_redis_client()
        if client is not None:
            _cache = CacheManager(client, ttl_minutes=settings.cache_ttl_minutes)

    return _cache
