"""Cache: Redis-backed analytics cache and key builders."""

from caseflow.infrastructure.cache.keys import analytics_key
from caseflow.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService", "analytics_key"]
