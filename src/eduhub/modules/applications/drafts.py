"""
Draft storage.

The wizard persists snapshots through an injected DraftStore rather than
any global. Values are JSON-compatible dicts. Writes are last-write-wins:
two sessions editing the same draft overwrite each other.
"""

import json
import logging
from typing import Any, Protocol

from redis.asyncio import Redis

from eduhub.core import redis as redis_module
from eduhub.core.config import settings

logger = logging.getLogger(__name__)

DRAFT_KEY = "eduhub:draft"
PACKAGED_KEY = "eduhub:packaged"


def draft_key(owner: str) -> str:
    return f"{DRAFT_KEY}:{owner}"


def packaged_key(owner: str) -> str:
    return f"{PACKAGED_KEY}:{owner}"


class DraftStore(Protocol):
    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, value: dict[str, Any]) -> None: ...

    async def clear(self, key: str) -> None: ...


class InMemoryDraftStore:
    """Process-local store. Used when Redis is unavailable and in tests."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        # Serialise so stored values never alias live objects
        self._data[key] = json.dumps(value)

    async def clear(self, key: str) -> None:
        self._data.pop(key, None)


class RedisDraftStore:
    def __init__(self, client: Redis, ttl_seconds: int | None = None) -> None:
        self._client = client
        self._ttl = ttl_seconds or settings.draft_ttl_seconds

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error(f"Discarding unreadable draft at {key}")
            await self._client.delete(key)
            return None

    async def set(self, key: str, value: dict[str, Any]) -> None:
        await self._client.set(key, json.dumps(value), ex=self._ttl)

    async def clear(self, key: str) -> None:
        await self._client.delete(key)


_fallback_store = InMemoryDraftStore()


async def get_draft_store() -> DraftStore:
    """FastAPI dependency: Redis-backed when connected, in-memory otherwise."""
    client = redis_module.redis_client
    if client is not None:
        return RedisDraftStore(client)
    return _fallback_store
