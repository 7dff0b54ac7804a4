"""Response caching for public read endpoints, backed by Redis when reachable."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import json
import threading
import time
from dataclasses import dataclass
from typing import Any

from loguru import logger

from benglish.config import settings

KEY_PREFIX = "benglish"


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "hex") and callable(getattr(value, "hex")):
        return value.hex()
    return str(value)


def build_cache_key(**components: Any) -> str:
    """Return a stable hash for the provided components."""

    payload = json.dumps(components, sort_keys=True, default=_json_default)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


_redis_module = None
if importlib.util.find_spec("redis") is not None:
    _redis_module = importlib.import_module("redis")


@dataclass
class _CacheEntry:
    expires_at: float | None
    payload: str


class CacheBackend:
    """JSON cache that writes through to Redis and keeps a local copy.

    A Redis error disables Redis for the rest of the process and the local
    dictionary keeps serving, so a missing cache server never fails a request.
    """

    def __init__(self, redis_url: str | None = None) -> None:
        self._lock = threading.Lock()
        self._local: dict[str, _CacheEntry] = {}
        self._redis = None
        if redis_url and _redis_module is not None:
            self._redis = _redis_module.Redis.from_url(
                redis_url, decode_responses=True, socket_timeout=1
            )

    @staticmethod
    def _compose(namespace: str, key: str) -> str:
        return f"{KEY_PREFIX}:{namespace}:{key}"

    def _drop_redis(self, exc: Exception) -> None:
        logger.warning("Redis cache unavailable, using local cache only", error=str(exc))
        self._redis = None

    def get(self, namespace: str, key: str) -> Any | None:
        namespaced = self._compose(namespace, key)
        if self._redis is not None:
            try:
                value = self._redis.get(namespaced)
            except Exception as exc:
                self._drop_redis(exc)
            else:
                if value is not None:
                    return json.loads(value)
        with self._lock:
            entry = self._local.get(namespaced)
            if not entry:
                return None
            if entry.expires_at is not None and entry.expires_at < time.time():
                self._local.pop(namespaced, None)
                return None
            return json.loads(entry.payload)

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        namespaced = self._compose(namespace, key)
        payload = json.dumps(value, default=_json_default)
        if self._redis is not None:
            try:
                self._redis.set(namespaced, payload, ex=ttl_seconds)
            except Exception as exc:
                self._drop_redis(exc)
        with self._lock:
            expires_at = time.time() + ttl_seconds if ttl_seconds else None
            self._local[namespaced] = _CacheEntry(expires_at=expires_at, payload=payload)

    def invalidate(self, namespace: str, *, key: str | None = None, prefix: str | None = None) -> None:
        """Drop one key, or every key of ``namespace`` starting with ``prefix``."""

        if key is not None:
            pattern = self._compose(namespace, key)
            exact = True
        elif prefix is not None:
            pattern = self._compose(namespace, prefix)
            exact = False
        else:
            return

        if self._redis is not None:
            try:
                if exact:
                    self._redis.delete(pattern)
                else:
                    for cache_key in self._redis.scan_iter(f"{pattern}*"):
                        self._redis.delete(cache_key)
            except Exception as exc:
                self._drop_redis(exc)
        with self._lock:
            if exact:
                self._local.pop(pattern, None)
            else:
                for cache_key in [k for k in self._local if k.startswith(pattern)]:
                    self._local.pop(cache_key, None)

    def clear(self, *, include_redis: bool = False) -> None:
        """Reset the in-memory cache (and optionally Redis) for test environments."""

        with self._lock:
            self._local.clear()
        if include_redis and self._redis is not None:
            try:
                for cache_key in self._redis.scan_iter(f"{KEY_PREFIX}:*"):
                    self._redis.delete(cache_key)
            except Exception as exc:
                self._drop_redis(exc)


cache_backend = CacheBackend(str(settings.REDIS_URL) if settings.REDIS_URL else None)


__all__ = ["cache_backend", "CacheBackend", "build_cache_key"]
