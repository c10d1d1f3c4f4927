import json
import redis
from redis.exceptions import RedisError

from roombook.core.config import get_settings
from roombook.core.logging_config import get_logger

logger = get_logger()

_redis_client = None


def get_redis_client():
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = get_settings().REDIS_URL

    if not redis_url:
        return None

    try:
        client = redis.Redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
        logger.info("Redis connected")
        _redis_client = client
        return _redis_client
    except RedisError as e:
        logger.warning(f"Redis unavailable, caching disabled -> {e}")
        return None


def get_cache(key: str):
    client = get_redis_client()
    if not client:
        return None
    try:
        data = client.get(key)
        return json.loads(data) if data else None
    except RedisError:
        return None


def set_cache(key: str, value, ttl: int | None = None):
    client = get_redis_client()
    if not client:
        return
    try:
        client.setex(key, ttl or get_settings().CACHE_TTL_SECONDS, json.dumps(value))
    except RedisError:
        pass


def delete_cache(*keys: str):
    client = get_redis_client()
    if not client:
        return
    try:
        client.delete(*keys)
    except RedisError:
        pass


def delete_cache_prefix(prefix: str):
    client = get_redis_client()
    if not client:
        return
    try:
        for key in client.scan_iter(f"{prefix}*"):
            client.delete(key)
    except RedisError:
        pass
