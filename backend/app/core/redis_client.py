"""Redis connection for the job store and scheduling markers."""
from functools import lru_cache

from redis import Redis

from app.core.config import settings


@lru_cache(maxsize=1)
def get_redis() -> Redis:
    """Shared Redis client (connections are pooled by redis-py)."""
    return Redis.from_url(settings.REDIS_URL)
