from typing import Any, Optional
from portfolio_tracker.core.redis_client import redis_client
from portfolio_tracker.core.logger import logger
import json
from portfolio_tracker.scripts.json_utils import json_serializer


class CacheManager:
    def __init__(self, prefix: str = "", client=None):
        self.prefix = prefix.rstrip(":")
        self.client = client or redis_client

    def _build_key(self, *parts: Any) -> str:
        """builds a cache key: symbols:reliance:20"""
        segments = [self.prefix]
        segments.extend(str(p) for p in parts if p is not None)
        return ":".join(segments)

    def get(self, *parts):
        key = self._build_key(*parts)
        data = self.client.get(key)
        if data:
            logger.debug(f"Cache hit: {key}")
            return json.loads(data)
        logger.debug(f"Cache miss: {key}")
        return None

    def set(self, data: Any, *parts, ttl: int = 300):
        key = self._build_key(*parts)
        self.client.set(key, json.dumps(data, default=json_serializer), ex=ttl)
        logger.debug(f"Cache set: {key} (TTL={ttl}s)")

    def clear(self, pattern: Optional[str] = None):
        """Delete all cache entries matching the given pattern."""
        pattern = pattern or f"{self.prefix}*"
        count = 0
        for key in self.client.scan_iter(pattern):
            self.client.delete(key)
            count += 1
        logger.info(f"Cleared {count} cache entries for pattern '{pattern}'")
        return count
