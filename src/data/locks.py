"""Per-deal funding locks backed by Redis.

Serializes ``record_investment`` for one deal across API workers. The SQL
store also takes ``SELECT ... FOR UPDATE`` row locks, so when Redis is
unreachable the request proceeds under the row lock alone.
"""

import logging
from contextlib import asynccontextmanager
from uuid import UUID

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, LockError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.config import settings

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None


async def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    return _redis_client


def _lock_key(deal_id: UUID) -> str:
    return f"whitecoat:deal-lock:{deal_id}"


@asynccontextmanager
async def deal_lock(deal_id: UUID, timeout: int | None = None):
    """Hold the funding lock for ``deal_id`` for the duration of the block.

    Raises ``LockError`` if another writer holds the lock past ``timeout``.
    """
    timeout = timeout or settings.deal_lock_timeout_seconds
    r = await get_redis()
    lock = r.lock(_lock_key(deal_id), timeout=timeout, blocking_timeout=timeout)

    try:
        acquired = await lock.acquire()
    except (RedisConnectionError, RedisTimeoutError):
        logger.warning("Redis unavailable, relying on row lock for deal %s", deal_id)
        acquired = None

    if acquired is False:
        raise LockError(f"Timed out waiting for funding lock on deal {deal_id}")

    try:
        yield
    finally:
        if acquired:
            try:
                await lock.release()
            except (LockError, RedisConnectionError, RedisTimeoutError):
                logger.warning("Could not release funding lock for deal %s", deal_id)
