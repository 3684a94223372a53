"""Sliding-window request throttles for the public write endpoints."""

from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Protocol

from redis import Redis

logger = logging.getLogger(__name__)


class Throttle(Protocol):
    def allow(self, key: str) -> bool: ...


class InMemoryThrottle:
    """Per-process throttle keeping a deque of hit timestamps per key."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self._max_requests = max_requests
        self._window = window_seconds
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()

    def allow(self, key: str) -> bool:
        """Record a hit for ``key`` unless the window is already full."""
        now = time.monotonic()
        cutoff = now - self._window
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self._max_requests:
                return False
            hits.append(now)
            return True


class RedisThrottle:
    """Throttle shared between replicas, kept in one Redis sorted set per key.

    Each hit is added optimistically in a MULTI block; when the resulting
    cardinality exceeds the limit the hit is withdrawn and the request denied.
    """

    def __init__(
        self,
        client: Redis,
        *,
        max_requests: int,
        window_seconds: int,
        key_prefix: str = "throttle",
    ) -> None:
        self._client = client
        self._max_requests = max_requests
        self._window_ms = window_seconds * 1000
        self._key_prefix = key_prefix

    def allow(self, key: str) -> bool:
        redis_key = f"{self._key_prefix}:{key}"
        now_ms = int(time.time() * 1000)
        member = f"{now_ms}:{self._client.incr(f'{redis_key}:seq')}"

        pipe = self._client.pipeline(transaction=True)
        pipe.zremrangebyscore(redis_key, 0, now_ms - self._window_ms)
        pipe.zadd(redis_key, {member: now_ms})
        pipe.zcard(redis_key)
        pipe.pexpire(redis_key, self._window_ms)
        pipe.pexpire(f"{redis_key}:seq", self._window_ms)
        _, _, count, _, _ = pipe.execute()

        if int(count) > self._max_requests:
            self._client.zrem(redis_key, member)
            return False
        return True


def build_throttle(
    backend: str,
    *,
    redis_url: str,
    max_requests: int,
    window_seconds: int,
) -> Throttle:
    """Instantiate the configured throttle, falling back to memory when Redis is unreachable."""
    if backend == "redis" and redis_url:
        import redis

        try:
            client = redis.from_url(redis_url)
            client.ping()
        except redis.RedisError as exc:
            logger.warning("redis throttle unavailable, falling back to in-memory: %s", exc)
        else:
            logger.info("throttle configured for redis backend at %s", redis_url)
            return RedisThrottle(client, max_requests=max_requests, window_seconds=window_seconds)

    logger.info("throttle using in-memory backend")
    return InMemoryThrottle(max_requests=max_requests, window_seconds=window_seconds)
