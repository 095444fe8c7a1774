import json
import logging
from typing import Any, Optional
import redis

from careerdocs.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """JSON values in Redis with a TTL. Used for generation results and drafts."""

    def __init__(self, redis_url: str):
        self.client = redis.Redis.from_url(redis_url, decode_responses=True)

    def get_json(self, key: str) -> Optional[Any]:
        val = self.client.get(key)
        if val is None:
            return None
        try:
            return json.loads(val)
        except json.JSONDecodeError:
            # treat a corrupt entry as a miss; the next write replaces it
            logger.warning(f"Ignoring undecodable cache entry {key}")
            return None

    def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.client.set(key, json.dumps(value, ensure_ascii=False), ex=ttl_seconds)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))


def get_cache() -> CacheService:
    return CacheService(settings.redis_url)
