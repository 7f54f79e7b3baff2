from typing import Optional, Any
import json
import logging
import redis.asyncio as redis
from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class RedisManager:
    """Redis connection manager and utilities"""

    def __init__(self):
        self._redis_client: Optional[Redis] = None
        self._is_connected = False

    async def connect(self, redis_url: str) -> None:
        """Establish Redis connection"""
        try:
            self._redis_client = redis.from_url(
                redis_url,
                encoding="utf-8",
                decode_responses=False,  # We'll handle encoding/decoding manually
                max_connections=20,
                retry_on_timeout=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                health_check_interval=30
            )

            # Test connection
            await self._redis_client.ping()
            self._is_connected = True
            logger.info("Redis connection established")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._is_connected = False
            raise

    async def disconnect(self) -> None:
        """Close Redis connection"""
        if self._redis_client:
            await self._redis_client.aclose()
            self._is_connected = False
            logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        """Get Redis client"""
        if not self._is_connected or not self._redis_client:
            raise RuntimeError("Redis is not connected")
        return self._redis_client

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    async def is_healthy(self) -> bool:
        """Check Redis health"""
        try:
            if self._redis_client:
                await self._redis_client.ping()
                return True
        except Exception as e:
            logger.error(f"Redis health check failed: {e}")
        return False


# Global Redis manager instance
redis_manager = RedisManager()


class CacheService:
    """JSON cache over Redis.

    Failures are logged and reported as misses, so an unavailable cache
    degrades to reading the datastore instead of failing the request.
    """

    DEFAULT_TTL = 3600  # 1 hour

    def __init__(self, redis_client: Redis, default_ttl: Optional[int] = None):
        self.redis = redis_client
        self.default_ttl = default_ttl or self.DEFAULT_TTL

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        try:
            value = await self.redis.get(key)
            if value is None:
                return None
            if isinstance(value, bytes):
                value = value.decode('utf-8')
            return json.loads(value)

        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache"""
        try:
            if ttl is None:
                ttl = self.default_ttl

            serialized_value = json.dumps(value, default=str).encode('utf-8')
            return bool(await self.redis.setex(key, ttl, serialized_value))

        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, *keys: str) -> bool:
        """Delete keys from cache"""
        try:
            result = await self.redis.delete(*keys)
            return result > 0
        except Exception as e:
            logger.error(f"Cache delete error for keys {keys}: {e}")
            return False


cache_service: Optional[CacheService] = None


async def init_redis_services(redis_url: str, default_ttl: Optional[int] = None) -> None:
    """Connect to Redis and create the cache service"""
    global cache_service

    await redis_manager.connect(redis_url)
    cache_service = CacheService(redis_manager.client, default_ttl=default_ttl)

    logger.info("Redis services initialized")


async def close_redis_services() -> None:
    """Close all Redis services"""
    global cache_service

    cache_service = None
    await redis_manager.disconnect()
    logger.info("Redis services closed")


def get_cache_service() -> Optional[CacheService]:
    """Dependency returning the cache, or None when caching is off"""
    return cache_service
