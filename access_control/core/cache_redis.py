# access_control/core/cache_redis.py
"""
Async Redis client for the assignment store, the derived caches and the
session identifiers.

The application factory owns the client: it is created once at startup,
pinged, handed to every repository, and closed on shutdown.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Optional

from redis.asyncio import Redis as AsyncRedis

from .config import Settings

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> AsyncRedis:
    """Build an async Redis client from settings (no I/O)."""
    return AsyncRedis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )


async def connect_redis_client(settings: Settings, client: Optional[Any] = None) -> Any:
    """
    Return a connected client, creating one when none is supplied.

    Raises:
        ConnectionError / RedisError: if the store cannot be reached.
    """
    redis = client if client is not None else create_redis_client(settings)
    try:
        await redis.ping()
    except BaseException as exc:
        logger.error("[REDIS] Async Redis client FAILED to connect: %s", exc)
        if client is None:
            with contextlib.suppress(BaseException):
                await redis.aclose()
        raise
    logger.info("[REDIS] Async Redis client initialized and connected")
    return redis


async def close_redis_client(client: Any) -> None:
    """Close the async Redis client."""
    if client is None:
        return
    try:
        closer = getattr(client, "aclose", None)
        if closer is not None:
            await closer()
    finally:
        logger.info("[REDIS] Async Redis client closed")
