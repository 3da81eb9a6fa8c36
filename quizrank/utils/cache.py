"""
Redis cache utility for leaderboard snapshots
"""
import redis
import json
import logging
from typing import Optional, Any
from quizrank.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-based cache for the global leaderboard

    Entries expire after LEADERBOARD_CACHE_TTL seconds and are dropped
    whenever a new attempt is recorded. Without REDIS_URL every call is
    a no-op and reads fall through to the database.
    """

    LEADERBOARD_KEY = "leaderboard:global"

    def __init__(self, redis_url: Optional[str] = None, default_ttl: int = 30):
        self.default_ttl = default_ttl
        self.redis_client = None

        if not redis_url:
            logger.info("REDIS_URL not set. Leaderboard caching disabled.")
            return

        try:
            self.redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def leaderboard_key(self, limit: int) -> str:
        return f"{self.LEADERBOARD_KEY}:{limit}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                logger.info(f"Cache hit: {key}")
                return json.loads(value)
            logger.info(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

    def set(
        self,
        key: str,
        value: Any,
        ttl: int = None
    ) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)

        Returns:
            Success status
        """
        if not self.redis_client:
            return False

        try:
            ttl = ttl or self.default_ttl
            serialized = json.dumps(value)
            self.redis_client.setex(key, ttl, serialized)
            logger.info(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

    def invalidate_leaderboard(self) -> bool:
        """Drop every cached leaderboard snapshot"""
        if not self.redis_client:
            return False

        try:
            keys = self.redis_client.keys(f"{self.LEADERBOARD_KEY}:*")
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} leaderboard cache entries")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService(
    redis_url=settings.REDIS_URL,
    default_ttl=settings.LEADERBOARD_CACHE_TTL
)
