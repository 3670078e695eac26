"""
Rendered-page cache abstraction.

Supports an in-process expiring cache for single-instance runs and tests, and
a Redis-backed implementation shared across server processes.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ResponseCache(Protocol):
    """Minimal cache interface for rendered HTML documents."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, html: str, ttl: int | None = None) -> None:
        ...

    def clear(self) -> None:
        ...


@dataclass
class CacheEntry:
    html: str
    expires_at: float


@dataclass
class InMemoryResponseCache:
    """Dict-backed cache whose entries expire ``ttl_seconds`` after being set."""

    ttl_seconds: int = 600
    clock: Clock = time.monotonic
    entries: dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self.entries.pop(key, None)
            return None
        return entry.html

    def set(self, key: str, html: str, ttl: int | None = None) -> None:
        expires_at = self.clock() + (self.ttl_seconds if ttl is None else ttl)
        self.entries[key] = CacheEntry(html=html, expires_at=expires_at)

    def clear(self) -> None:
        self.entries.clear()


@dataclass
class RedisResponseCache:
    """
    Redis-backed cache; keys are namespaced under ``prefix`` and expire via SETEX.

    Redis failures degrade to cache misses so a cache outage never fails a request.
    """

    url: str
    prefix: str = "licsite:ssr:"
    ttl_seconds: int = 600

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url, decode_responses=True)

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(self.prefix + key)
        except redis_exceptions.RedisError as exc:
            logger.warning("Page cache read failed for %s: %s", key, exc)
            return None

    def set(self, key: str, html: str, ttl: int | None = None) -> None:
        try:
            self.client.setex(
                self.prefix + key, self.ttl_seconds if ttl is None else ttl, html
            )
        except redis_exceptions.RedisError as exc:
            logger.warning("Page cache write failed for %s: %s", key, exc)

    def clear(self) -> None:
        try:
            keys = list(self.client.scan_iter(match=f"{self.prefix}*", count=100))
            if keys:
                self.client.delete(*keys)
        except redis_exceptions.RedisError as exc:
            logger.warning("Page cache clear failed: %s", exc)
