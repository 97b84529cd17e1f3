"""
Shared test fixtures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from eduhub.core import redis as redis_module
from eduhub.core.rate_limit import reset_memory_store


@pytest.fixture(autouse=True)
def isolated_rate_limits(monkeypatch):
    """Every test starts with no Redis and an empty in-memory limiter."""
    monkeypatch.setattr(redis_module, "redis_client", None)
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock()
    redis.pipeline = MagicMock()
    pipe = AsyncMock()
    pipe.zremrangebyscore = MagicMock()
    pipe.zcard = MagicMock()
    pipe.zadd = MagicMock()
    pipe.expire = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 0, 1, True])
    redis.pipeline.return_value = pipe
    return redis
