# access_control/repositories/base_repository.py
"""
Base Repository Pattern for the access-control engine

Every repository talks to the same async key-value client and shares:
- Key namespace construction (KeySpace)
- Translation of store failures into StoreUnavailableException
- Prefix scans

Services never touch the client directly.
"""

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncIterator, List

from redis.exceptions import RedisError

from ..core.exceptions import StoreUnavailableException
from ..core.keys import KeySpace

STORE_ERROR_TYPES: tuple[type[BaseException], ...] = (
    RedisError,
    ConnectionError,
    TimeoutError,
    OSError,
)

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base class for repositories backed by the async Redis client."""

    def __init__(self, redis: Any, keys: KeySpace):
        self.redis = redis
        self.keys = keys
        self.logger = logging.getLogger(self.__class__.__name__)

    @asynccontextmanager
    async def store_call(self, operation: str) -> AsyncIterator[None]:
        """
        Wrap store I/O so failures surface as StoreUnavailableException.

        Usage:
            async with self.store_call("assign_modules"):
                await self.redis.sadd(key, *modules)
        """
        try:
            yield
        except STORE_ERROR_TYPES as exc:
            self.logger.error(f"Store operation {operation} failed: {exc}")
            raise StoreUnavailableException(operation, str(exc)) from exc

    async def scan_keys(self, pattern: str) -> List[str]:
        """Collect every key matching ``pattern`` (SCAN, never KEYS)."""
        found: List[str] = []
        async for key in self.redis.scan_iter(match=pattern):
            found.append(key)
        return sorted(found)
