# access_control/repositories/session_repository.py
"""Redis-backed session identifiers for token revocation."""

from __future__ import annotations

from datetime import datetime, timezone
import math
from typing import Optional

from ..schemas.auth import StoredSession
from .base_repository import RedisRepository


def _ttl_seconds(expires_at: datetime, now: datetime) -> int:
    return math.ceil((expires_at - now).total_seconds())


class SessionRepository(RedisRepository):
    """
    Mirrors the unique identifier of every issued token in the store.

    A token is only honoured while its identifier is present, which makes an
    otherwise self-contained token revocable. Entries expire with the token.
    """

    async def store_session(self, session: StoredSession, *, now: Optional[datetime] = None) -> None:
        now = now or datetime.now(timezone.utc)
        access_ttl = _ttl_seconds(session.access_expires_at, now)
        refresh_ttl = _ttl_seconds(session.refresh_expires_at, now)
        if access_ttl <= 0 or refresh_ttl <= 0:
            raise ValueError("Cannot store a session whose tokens are already expired")
        async with self.store_call("store_session"):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(self.keys.session(session.access_uuid), session.user_id, ex=access_ttl)
                pipe.set(self.keys.session(session.refresh_uuid), session.user_id, ex=refresh_ttl)
                await pipe.execute()

    async def get_user_id(self, token_uuid: str) -> Optional[str]:
        async with self.store_call("get_session"):
            return await self.redis.get(self.keys.session(token_uuid))

    async def consume(self, token_uuid: str) -> Optional[str]:
        """Atomically read and delete an identifier (single-use refresh)."""
        async with self.store_call("consume_session"):
            return await self.redis.getdel(self.keys.session(token_uuid))

    async def delete(self, token_uuid: str) -> bool:
        async with self.store_call("delete_session"):
            return bool(await self.redis.delete(self.keys.session(token_uuid)))
