# access_control/repositories/assignment_repository.py
"""
Assignment Repository

Per-role sets of assigned modules, submodules, sections and actions.

Writes do not enforce the parent/child invariant (a submodule assignment
without its module assignment is stored as-is); the resolver applies it at
read time.
"""

from typing import Dict, List, Sequence, Set

from .base_repository import RedisRepository


class AssignmentRepository(RedisRepository):
    """Repository for the module/submodule/section/action sets of roles."""

    # Modules

    async def assign_modules(self, role_id: str, modules: Sequence[str]) -> None:
        if not modules:
            return
        async with self.store_call("assign_modules"):
            await self.redis.sadd(self.keys.role_modules(role_id), *modules)

    async def unassign_modules(self, role_id: str, modules: Sequence[str]) -> None:
        if not modules:
            return
        async with self.store_call("unassign_modules"):
            await self.redis.srem(self.keys.role_modules(role_id), *modules)

    async def modules(self, role_id: str) -> Set[str]:
        async with self.store_call("role_modules"):
            return set(await self.redis.smembers(self.keys.role_modules(role_id)))

    # Submodules

    async def assign_submodules(self, role_id: str, module: str, submodules: Sequence[str]) -> None:
        if not submodules:
            return
        async with self.store_call("assign_submodules"):
            await self.redis.sadd(self.keys.role_submodules(role_id, module), *submodules)

    async def unassign_submodules(
        self, role_id: str, module: str, submodules: Sequence[str]
    ) -> None:
        if not submodules:
            return
        async with self.store_call("unassign_submodules"):
            await self.redis.srem(self.keys.role_submodules(role_id, module), *submodules)

    async def submodules(self, role_id: str, module: str) -> Set[str]:
        async with self.store_call("role_submodules"):
            return set(await self.redis.smembers(self.keys.role_submodules(role_id, module)))

    # Sections

    async def assign_sections(
        self, role_id: str, module: str, submodule: str, sections: Sequence[str]
    ) -> None:
        if not sections:
            return
        async with self.store_call("assign_sections"):
            await self.redis.sadd(self.keys.role_sections(role_id, module, submodule), *sections)

    async def unassign_sections(
        self, role_id: str, module: str, submodule: str, sections: Sequence[str]
    ) -> None:
        if not sections:
            return
        async with self.store_call("unassign_sections"):
            await self.redis.srem(self.keys.role_sections(role_id, module, submodule), *sections)

    async def sections(self, role_id: str, module: str, submodule: str) -> Set[str]:
        async with self.store_call("role_sections"):
            key = self.keys.role_sections(role_id, module, submodule)
            return set(await self.redis.smembers(key))

    # Actions

    async def assign_actions(
        self, role_id: str, module: str, submodule: str, actions: Sequence[str]
    ) -> None:
        if not actions:
            return
        async with self.store_call("assign_actions"):
            await self.redis.sadd(self.keys.role_actions(role_id, module, submodule), *actions)

    async def unassign_actions(
        self, role_id: str, module: str, submodule: str, actions: Sequence[str]
    ) -> None:
        if not actions:
            return
        async with self.store_call("unassign_actions"):
            await self.redis.srem(self.keys.role_actions(role_id, module, submodule), *actions)

    async def actions(self, role_id: str, module: str, submodule: str) -> Set[str]:
        async with self.store_call("role_actions"):
            key = self.keys.role_actions(role_id, module, submodule)
            return set(await self.redis.smembers(key))

    # Read-outs per role

    async def submodules_by_role(self, role_id: str) -> Dict[str, List[str]]:
        """Map every assigned module to its sorted submodule list."""
        result: Dict[str, List[str]] = {}
        for module in sorted(await self.modules(role_id)):
            result[module] = sorted(await self.submodules(role_id, module))
        return result

    async def sections_by_role(self, role_id: str) -> Dict[str, Dict[str, List[str]]]:
        """Map module -> submodule -> sorted sections for every stored section set."""
        return await self._nested_by_role(role_id, "sections")

    async def actions_by_role(self, role_id: str) -> Dict[str, Dict[str, List[str]]]:
        """Map module -> submodule -> sorted actions for every stored action set."""
        return await self._nested_by_role(role_id, "actions")

    async def _nested_by_role(self, role_id: str, facet: str) -> Dict[str, Dict[str, List[str]]]:
        prefix = self.keys.role_facet_prefix(role_id, facet)
        result: Dict[str, Dict[str, List[str]]] = {}
        async with self.store_call(f"{facet}_by_role"):
            for key in await self.scan_keys(self.keys.role_facet_pattern(role_id, facet)):
                module, _, submodule = key[len(prefix):].partition(":")
                if not module or not submodule:
                    continue
                members = await self.redis.smembers(key)
                if members:
                    result.setdefault(module, {})[submodule] = sorted(members)
        return result
