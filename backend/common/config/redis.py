"""Redis configuration and helpers."""
from __future__ import annotations

import os

from redis import Redis

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
# 0 disables expiry
TRACKING_CACHE_TTL_SEC = int(os.getenv("TRACKING_CACHE_TTL_SEC", str(7 * 24 * 3600)))


def create_redis_client() -> Redis:
    """Create a sync Redis client for the tracking cache."""
    return Redis.from_url(REDIS_URL, decode_responses=True)
