"""Redis read-through cache for short code resolution."""

import logging
from typing import Optional

import redis.asyncio as redis


class RedisCache:
    """Redis cache mapping short codes to destination URLs.

    Every operation degrades to a miss/no-op on Redis errors; the store is
    always the source of truth.
    """

    KEY_PREFIX = "shortlink:code:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if redis_url:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis; disables the cache if Redis is unreachable."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except Exception as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    async def get(self, short_code: str) -> Optional[str]:
        """Cached destination for a short code, or None."""
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.get_cache_key(short_code))
        except Exception as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, short_code: str, original_url: str, ttl: Optional[int] = None) -> bool:
        """Cache a destination for a short code."""
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.get_cache_key(short_code), ttl or self.ttl_seconds, original_url)
            return True
        except Exception as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def delete(self, short_code: str) -> bool:
        """Drop the cached destination for a short code."""
        if not self.enabled or not self.client:
            return False

        try:
            result = await self.client.delete(self.get_cache_key(short_code))
            return result > 0
        except Exception as e:
            self.logger.error(f"Cache delete error: {e}")
            return False

    async def ping(self) -> bool:
        """True if the cache is disabled or Redis answers."""
        if not self.enabled or not self.client:
            return True

        try:
            await self.client.ping()
            return True
        except Exception as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")

    def get_cache_key(self, short_code: str) -> str:
        return f"{self.KEY_PREFIX}{short_code}"
