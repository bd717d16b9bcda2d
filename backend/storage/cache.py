"""
Key-value caches for per-keyframe detections and whole tracking sessions.

The orchestrator only needs ``get`` / ``set`` / ``remove`` on string values;
payloads are JSON produced by the pydantic models.
"""
from __future__ import annotations

import logging
import threading
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from common.config import TRACKING_CACHE_TTL_SEC, create_redis_client
from tracking.config import DETECTION_CACHE_PREFIX, TRACKING_CACHE_PREFIX

logger = logging.getLogger(__name__)


def detection_cache_key(event_id: str, timestamp: float) -> str:
    return f"{DETECTION_CACHE_PREFIX}{event_id}-{timestamp:.1f}"


def tracking_cache_key(event_id: str) -> str:
    return f"{TRACKING_CACHE_PREFIX}{event_id}"


class TrackingCache(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> bool: ...

    def remove(self, key: str) -> None: ...


class InMemoryCache:
    """Process-local cache, used by tests and one-off CLI runs."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            self._data[key] = value
        return True

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class RedisCache:
    """Redis-backed cache. Backend errors degrade to misses and failed writes.

    Calls block; async callers run them in a worker thread.
    """

    def __init__(self, client: Redis | None = None, ttl_seconds: int | None = TRACKING_CACHE_TTL_SEC):
        self._client = client or create_redis_client()
        self._ttl = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except RedisError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    def set(self, key: str, value: str) -> bool:
        try:
            self._client.set(key, value, ex=self._ttl)
            return True
        except RedisError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)
            return False

    def remove(self, key: str) -> None:
        try:
            self._client.delete(key)
        except RedisError as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    def close(self) -> None:
        try:
            self._client.close()
        except RedisError as exc:
            logger.warning("Closing Redis client failed: %s", exc)
