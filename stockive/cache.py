from functools import wraps
import logging
import pickle
from typing import Callable, Iterable

import redis
from redis.exceptions import RedisError

from stockive.core.config import settings

logger = logging.getLogger(__name__)

# Cache key prefixes
PREFIX_STORES = "stores"
PREFIX_CONTEXT = "context"

# Redis client setup, connects lazily on first command
redis_client = redis.Redis.from_url(
    settings.REDIS_URL,
    decode_responses=False  # Keep as binary for pickle serialization
)


def _cache_key(prefix: str, func_name: str, kwargs: dict) -> str:
    user = kwargs.get("current_user")
    user_id = getattr(user, "id", None)
    # Sessions and requests differ per call and must stay out of the key
    params = sorted(
        (k, v) for k, v in kwargs.items()
        if isinstance(v, (str, int, float, bool, type(None))) and k != "current_user"
    )
    return f"{prefix}:{user_id}:{func_name}:{params}"


# Cache decorator
def cache(prefix: str, expire: int = None):
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.CACHE_ENABLED:
                return await func(*args, **kwargs)

            cache_key = _cache_key(prefix, func.__name__, kwargs)

            # Try to get data from cache
            try:
                cached_data = redis_client.get(cache_key)
            except RedisError as e:
                logger.warning(f"Redis not available, serving uncached: {e}")
                return await func(*args, **kwargs)
            if cached_data:
                return pickle.loads(cached_data)

            # If not in cache, call the function
            result = await func(*args, **kwargs)

            # Store the result in cache
            try:
                redis_client.setex(
                    name=cache_key,
                    time=expire or settings.CACHE_EXPIRE_SECONDS,
                    value=pickle.dumps(result)
                )
            except RedisError as e:
                logger.warning(f"Could not store {cache_key} in cache: {e}")

            return result
        return wrapper
    return decorator


def invalidate(prefixes: Iterable[str]) -> int:
    """Drop every cached entry under the given prefixes."""
    if not settings.CACHE_ENABLED:
        return 0
    prefixes = tuple(prefixes)
    removed = 0
    try:
        for prefix in prefixes:
            keys = redis_client.keys(f"{prefix}:*")
            if keys:
                removed += redis_client.delete(*keys)
    except RedisError as e:
        logger.warning(f"Cache invalidation skipped: {e}")
        return 0
    if removed:
        logger.info(f"Invalidated {removed} cached entries for {list(prefixes)}")
    return removed
