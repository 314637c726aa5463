"""
cache.py — Key-value slot for the persisted session.

One key holds the JSON-serialized Session (default key: "finbuddy_user").

Design:
  - Uses redis.asyncio (async client, part of redis-py 5.x)
  - Pool created once in lifespan, stored on app.state.redis
  - Slots take the client as a constructor param; no module-level global state
  - MemorySessionSlot is the process-local variant (session_backend="memory")
  - Logs only the key, never the stored value (it contains the email)
"""
import logging
from typing import Optional, Protocol

import redis.asyncio as aioredis

from finbuddy.config import settings

logger = logging.getLogger(__name__)


class SessionSlot(Protocol):
    """Single durable string value. read() returns None when nothing is stored."""

    async def read(self) -> Optional[str]: ...

    async def write(self, value: str) -> None: ...

    async def clear(self) -> None: ...


# ---------------------------------------------------------------------------
# Pool factory, called once in lifespan
# ---------------------------------------------------------------------------

async def create_redis_pool(url: str = settings.redis_url) -> aioredis.Redis:
    """
    Create and return an async Redis connection pool.
    Called once in FastAPI lifespan startup; stored on app.state.redis.
    Verifies connectivity with PING before returning.
    """
    client = aioredis.from_url(
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    await client.ping()
    logger.info("Redis connection pool established at %s", url)
    return client


# ---------------------------------------------------------------------------
# Slots
# ---------------------------------------------------------------------------

class RedisSessionSlot:
    """Session slot stored under one Redis key, optionally with a TTL."""

    def __init__(
        self,
        client: aioredis.Redis,
        key: str = settings.session_key,
        ttl_seconds: int = settings.session_ttl_seconds,
    ) -> None:
        self.client = client
        self.key = key
        self.ttl_seconds = ttl_seconds

    async def read(self) -> Optional[str]:
        raw = await self.client.get(self.key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        return raw

    async def write(self, value: str) -> None:
        """Overwrites any existing value; resets the TTL when one is configured."""
        if self.ttl_seconds > 0:
            await self.client.setex(self.key, self.ttl_seconds, value)
        else:
            await self.client.set(self.key, value)
        logger.info("Session slot written key=%s ttl=%ds", self.key, self.ttl_seconds)

    async def clear(self) -> None:
        await self.client.delete(self.key)
        logger.info("Session slot cleared key=%s", self.key)


class MemorySessionSlot:
    """Process-local slot. Survives SessionStore instances, not process restarts."""

    def __init__(self, initial: Optional[str] = None) -> None:
        self.value = initial

    async def read(self) -> Optional[str]:
        return self.value

    async def write(self, value: str) -> None:
        self.value = value

    async def clear(self) -> None:
        self.value = None
