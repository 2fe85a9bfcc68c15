# access_control/repositories/role_repository.py
"""
Role Repository

Handles role records and the symmetric role <-> user assignment indexes:
- roles hash (role id -> name) and the role id counter
- per-user role sets and per-role user sets (reverse index)
- cascading role deletion
"""

from typing import List, Optional, Sequence

from ..schemas.rbac import Role
from .base_repository import RedisRepository


class RoleRepository(RedisRepository):
    """Repository for roles and role <-> user assignments."""

    ROLE_ID_PREFIX = "r"

    async def add_role(self, name: str) -> str:
        """Create a role and return its id (``r<n>``)."""
        async with self.store_call("add_role"):
            seq = await self.redis.incr(self.keys.role_sequence())
            role_id = f"{self.ROLE_ID_PREFIX}{seq}"
            await self.redis.hset(self.keys.roles(), role_id, name)
        return role_id

    async def edit_role(self, role_id: str, name: str) -> None:
        async with self.store_call("edit_role"):
            await self.redis.hset(self.keys.roles(), role_id, name)

    async def role_exists(self, role_id: str) -> bool:
        async with self.store_call("role_exists"):
            return bool(await self.redis.hexists(self.keys.roles(), role_id))

    async def get_role(self, role_id: str) -> Optional[Role]:
        async with self.store_call("get_role"):
            name = await self.redis.hget(self.keys.roles(), role_id)
        if name is None:
            return None
        return Role(id=role_id, name=name)

    async def list_roles(self) -> List[Role]:
        async with self.store_call("list_roles"):
            raw = await self.redis.hgetall(self.keys.roles())
        return [Role(id=role_id, name=name) for role_id, name in sorted(raw.items())]

    async def users_by_role(self, role_id: str) -> List[str]:
        async with self.store_call("users_by_role"):
            members = await self.redis.smembers(self.keys.role_users(role_id))
        return sorted(members)

    async def roles_by_user(self, user_id: str) -> List[str]:
        """Return the user's role ids in ascending lexicographic order."""
        async with self.store_call("roles_by_user"):
            members = await self.redis.smembers(self.keys.user_roles(user_id))
        return sorted(members)

    async def assign_roles(self, user_id: str, role_ids: Sequence[str]) -> None:
        """Add roles to a user and the user to each role's reverse index."""
        if not role_ids:
            return
        async with self.store_call("assign_roles"):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.sadd(self.keys.user_roles(user_id), *role_ids)
                for role_id in role_ids:
                    pipe.sadd(self.keys.role_users(role_id), user_id)
                await pipe.execute()

    async def unassign_roles(self, user_id: str, role_ids: Sequence[str]) -> None:
        if not role_ids:
            return
        async with self.store_call("unassign_roles"):
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.srem(self.keys.user_roles(user_id), *role_ids)
                for role_id in role_ids:
                    pipe.srem(self.keys.role_users(role_id), user_id)
                await pipe.execute()

    async def delete_role(self, role_id: str) -> List[str]:
        """
        Delete a role and everything stored under its namespace.

        The reverse index is read before anything is removed and the ids of
        the users that held the role are returned, so callers can fan out
        cache invalidation after the index is gone.

        All removals go through one MULTI/EXEC block. A failure before EXEC
        leaves the store untouched; the store gives no rollback if EXEC
        itself is interrupted.
        """
        async with self.store_call("delete_role"):
            user_ids = sorted(await self.redis.smembers(self.keys.role_users(role_id)))
            role_keys = await self.scan_keys(self.keys.role_pattern(role_id))
            async with self.redis.pipeline(transaction=True) as pipe:
                for user_id in user_ids:
                    pipe.srem(self.keys.user_roles(user_id), role_id)
                pipe.delete(self.keys.role_users(role_id))
                pipe.hdel(self.keys.roles(), role_id)
                for key in role_keys:
                    pipe.delete(key)
                await pipe.execute()
        self.logger.info(
            f"Deleted role {role_id}: {len(role_keys)} keys removed, {len(user_ids)} users affected"
        )
        return user_ids
