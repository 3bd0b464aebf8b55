import os
import json
from datetime import date

import redis
from redis.exceptions import RedisError
from dotenv import load_dotenv

from app.core.logging_config import get_logger

load_dotenv()

logger = get_logger()

AVAILABILITY_CACHE_TTL = int(os.getenv("AVAILABILITY_CACHE_TTL", 60))

_redis_client = None


def get_redis_client():
    """Shared client, or None when REDIS_URL is unset or unreachable."""
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    redis_url = os.getenv("REDIS_URL")
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
    except RedisError as e:
        logger.warning(f"Redis unavailable, availability cache disabled: {e}")
        return None

    logger.info("Redis connected")
    _redis_client = client
    return _redis_client


# ---------------------------------------------------------------------
# AVAILABILITY CACHE
# Cache failures only cost a database query, so they never fail a request.
# ---------------------------------------------------------------------
def availability_key(ground_id: int, day: date) -> str:
    return f"availability:{ground_id}:{day.isoformat()}"


def get_cached_availability(ground_id: int, day: date):
    client = get_redis_client()
    if not client:
        return None
    try:
        data = client.get(availability_key(ground_id, day))
    except RedisError as e:
        logger.warning(f"Availability cache read failed: {e}")
        return None
    return json.loads(data) if data else None


def cache_availability(ground_id: int, day: date, value: dict):
    client = get_redis_client()
    if not client:
        return
    try:
        client.setex(availability_key(ground_id, day), AVAILABILITY_CACHE_TTL, json.dumps(value))
    except RedisError as e:
        logger.warning(f"Availability cache write failed: {e}")


def invalidate_availability(ground_ids: list[int], day: date):
    """Forget cached slots for every ground whose hours a booking write touched."""
    client = get_redis_client()
    if not client or not ground_ids:
        return
    try:
        client.delete(*(availability_key(gid, day) for gid in ground_ids))
    except RedisError as e:
        logger.warning(f"Availability cache invalidation failed: {e}")
