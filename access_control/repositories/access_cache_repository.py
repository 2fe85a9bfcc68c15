# access_control/repositories/access_cache_repository.py
"""
Access Cache Repository

Holds the derived per-user caches written by the resolver:
- the resolved access tree (one JSON document per user)
- the resolved action lists (one JSON document per user and module)
- the flattened permission set used for O(1) permission checks

Every write replaces the previous value wholesale; nothing here is ever
merged with what was cached before.
"""

from typing import Dict, Iterable, Optional, Set

from .base_repository import RedisRepository


class AccessCacheRepository(RedisRepository):
    """Repository for the per-user access/action caches."""

    # Access tree

    async def get_access_list(self, user_id: str) -> Optional[str]:
        async with self.store_call("get_access_list"):
            return await self.redis.get(self.keys.access_cache(user_id))

    async def set_access_list(self, user_id: str, payload: str) -> None:
        async with self.store_call("set_access_list"):
            await self.redis.set(self.keys.access_cache(user_id), payload)

    async def delete_access_list(self, user_id: str) -> None:
        async with self.store_call("delete_access_list"):
            await self.redis.delete(self.keys.access_cache(user_id))

    # Action lists and the flattened permission set

    async def get_action_list(self, user_id: str, module: str) -> Optional[str]:
        async with self.store_call("get_action_list"):
            return await self.redis.get(self.keys.actions_cache(user_id, module))

    async def replace_action_lists(
        self,
        user_id: str,
        modules: Dict[str, str],
        permissions: Iterable[str],
    ) -> None:
        """
        Swap in a freshly computed action cache in one MULTI/EXEC block.

        Module documents that are no longer produced are removed, so a module
        that lost its last role does not linger in the cache.
        """
        permission_list = sorted(set(permissions))
        async with self.store_call("replace_action_lists"):
            stale = await self.scan_keys(self.keys.actions_cache_pattern(user_id))
            async with self.redis.pipeline(transaction=True) as pipe:
                for key in stale:
                    pipe.delete(key)
                pipe.delete(self.keys.permissions_cache(user_id))
                for module, payload in sorted(modules.items()):
                    pipe.set(self.keys.actions_cache(user_id, module), payload)
                if permission_list:
                    pipe.sadd(self.keys.permissions_cache(user_id), *permission_list)
                await pipe.execute()

    async def delete_action_lists(self, user_id: str) -> None:
        async with self.store_call("delete_action_lists"):
            stale = await self.scan_keys(self.keys.actions_cache_pattern(user_id))
            async with self.redis.pipeline(transaction=True) as pipe:
                for key in stale:
                    pipe.delete(key)
                pipe.delete(self.keys.permissions_cache(user_id))
                await pipe.execute()

    async def has_permission(self, user_id: str, permission: str) -> bool:
        async with self.store_call("has_permission"):
            return bool(await self.redis.sismember(self.keys.permissions_cache(user_id), permission))

    async def permissions(self, user_id: str) -> Set[str]:
        async with self.store_call("permissions"):
            return set(await self.redis.smembers(self.keys.permissions_cache(user_id)))
