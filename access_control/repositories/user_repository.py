# access_control/repositories/user_repository.py
"""
User Repository

Users are stored as hashes keyed by id, with an email -> id index for login.
"""

from typing import Dict, List, Optional

from ..schemas.rbac import User
from .base_repository import RedisRepository


def _user_from_hash(raw: Dict[str, str]) -> Optional[User]:
    if not raw or not raw.get("id"):
        return None
    return User(
        id=raw["id"],
        email=raw.get("email", ""),
        name=raw.get("name", ""),
        is_admin=raw.get("is_admin") == "1",
    )


class UserRepository(RedisRepository):
    """Repository for user records."""

    async def add_user(self, user: User) -> None:
        mapping = {
            "id": user.id,
            "email": str(user.email),
            "name": user.name,
            "is_admin": "1" if user.is_admin else "0",
        }
        async with self.store_call("add_user"):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hset(self.keys.user(user.id), mapping=mapping)
                pipe.hset(self.keys.users(), str(user.email), user.id)
                await pipe.execute()

    async def get_user(self, user_id: str) -> Optional[User]:
        async with self.store_call("get_user"):
            raw = await self.redis.hgetall(self.keys.user(user_id))
        return _user_from_hash(raw)

    async def get_user_id_by_email(self, email: str) -> Optional[str]:
        async with self.store_call("get_user_id_by_email"):
            return await self.redis.hget(self.keys.users(), email)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = await self.get_user_id_by_email(email)
        if not user_id:
            return None
        return await self.get_user(user_id)

    async def user_exists(self, user_id: str) -> bool:
        async with self.store_call("user_exists"):
            return bool(await self.redis.exists(self.keys.user(user_id)))

    async def list_users(self) -> List[User]:
        async with self.store_call("list_users"):
            user_ids = sorted(set((await self.redis.hgetall(self.keys.users())).values()))
        users: List[User] = []
        for user_id in user_ids:
            user = await self.get_user(user_id)
            if user is not None:
                users.append(user)
        return users
