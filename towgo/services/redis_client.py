"""Redis client for caching and short-lived records."""
import json
import logging
from typing import Any, Iterator, Optional

import redis

from towgo.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Redis client wrapper with caching utilities."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[redis.Redis] = None):
        settings = settings or default_settings
        self.client = client or redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
        )

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        try:
            value = self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Redis GET error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with optional TTL."""
        try:
            serialized = json.dumps(value)
            if ttl:
                self.client.setex(key, ttl, serialized)
            else:
                self.client.set(key, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"Redis SET error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key. Returns True only if something was removed."""
        try:
            return bool(self.client.delete(key))
        except redis.RedisError as e:
            logger.error(f"Redis DELETE error for {key}: {e}")
            return False

    def keys(self, pattern: str) -> Iterator[str]:
        """Iterate over keys matching a glob pattern."""
        try:
            yield from self.client.scan_iter(match=pattern)
        except redis.RedisError as e:
            logger.error(f"Redis SCAN error for {pattern}: {e}")

    def ping(self) -> bool:
        """Check if Redis is connected."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False


# Global Redis client instance
redis_client = RedisClient()
