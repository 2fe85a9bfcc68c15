# access_control/services/access_list_service.py
"""
Access-List Resolver

Merges every role a user holds into one permission tree:
- the access tree (module -> submodules -> sections) shown by the UI
- the action lists per module
- the flattened permission set used by request-time checks

Roles are applied in ascending role-id order and a later role replaces the
whole entry of a module an earlier role produced. Everything is read before
anything is written, so a store failure leaves the previous cache intact.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Set

from ..core.exceptions import NotFoundException
from ..core.keys import validate_identifier
from ..repositories.access_cache_repository import AccessCacheRepository
from ..repositories.assignment_repository import AssignmentRepository
from ..repositories.role_repository import RoleRepository
from ..repositories.template_repository import TemplateRepository
from ..schemas.access import (
    ActionState,
    ResolvedAccess,
    ResolvedActions,
    ResolvedModuleAccess,
    ResolvedModuleActions,
    ResolvedSubModuleAccess,
    ResolvedSubModuleActions,
)
from ..schemas.template import TemplateModule
from .base import BaseService

logger = logging.getLogger(__name__)

TemplateCache = Dict[str, Optional[TemplateModule]]


def _dumps(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def serialize_access(access: ResolvedAccess) -> str:
    return _dumps({name: module.model_dump() for name, module in access.items()})


def serialize_module_actions(module: ResolvedModuleActions) -> str:
    return _dumps(module.model_dump())


class AccessListService(BaseService):
    """Resolves and caches per-user access and action lists."""

    def __init__(
        self,
        templates: TemplateRepository,
        roles: RoleRepository,
        assignments: AssignmentRepository,
        cache: AccessCacheRepository,
    ):
        super().__init__()
        self.templates = templates
        self.roles = roles
        self.assignments = assignments
        self.cache = cache

    async def _template(self, name: str, seen: TemplateCache) -> Optional[TemplateModule]:
        if name not in seen:
            seen[name] = await self.templates.get_module(name)
            if seen[name] is None:
                logger.debug(f"[RESOLVER] Module {name} is not in the template, skipping")
        return seen[name]

    # Per-role trees

    async def _role_access(self, role_id: str, seen: TemplateCache) -> ResolvedAccess:
        result: ResolvedAccess = {}
        for module_name in sorted(await self.assignments.modules(role_id)):
            template = await self._template(module_name, seen)
            if template is None:
                continue
            granted = await self.assignments.submodules(role_id, module_name)
            submodules: List[ResolvedSubModuleAccess] = []
            for submodule in template.submodules:
                has_access = submodule.name in granted
                sections = {section: False for section in submodule.sections}
                if has_access:
                    assigned = await self.assignments.sections(role_id, module_name, submodule.name)
                    for section in submodule.sections:
                        sections[section] = section in assigned
                submodules.append(
                    ResolvedSubModuleAccess(
                        name=submodule.name, access=has_access, sections=sections
                    )
                )
            result[module_name] = ResolvedModuleAccess(
                name=module_name, access=True, submodules=submodules
            )
        return result

    async def _role_actions(
        self, role_id: str, seen: TemplateCache
    ) -> Dict[str, ResolvedModuleActions]:
        result: Dict[str, ResolvedModuleActions] = {}
        for module_name in sorted(await self.assignments.modules(role_id)):
            template = await self._template(module_name, seen)
            if template is None:
                continue
            granted = await self.assignments.submodules(role_id, module_name)
            submodules: List[ResolvedSubModuleActions] = []
            for submodule in template.submodules:
                has_access = submodule.name in granted
                actions: Dict[str, ActionState] = {}
                if has_access:
                    assigned = await self.assignments.actions(role_id, module_name, submodule.name)
                    actions = {
                        action.name: ActionState(
                            title=action.title, allowed=action.name in assigned
                        )
                        for action in submodule.actions
                    }
                submodules.append(
                    ResolvedSubModuleActions(
                        name=submodule.name, access=has_access, actions=actions
                    )
                )
            result[module_name] = ResolvedModuleActions(
                name=module_name, access=True, submodules=submodules
            )
        return result

    @BaseService.measure_operation("role_access_list")
    async def role_access_list(self, role_id: str) -> ResolvedAccess:
        """The access tree a single role grants, without touching any cache."""
        validate_identifier(role_id, "role id")
        if not await self.roles.role_exists(role_id):
            raise NotFoundException(f"Role {role_id} not found", code="ROLE_NOT_FOUND")
        return await self._role_access(role_id, {})

    # Resolution

    @BaseService.measure_operation("resolve_access")
    async def resolve_access(self, user_id: str) -> ResolvedAccess:
        """
        Recompute and overwrite the user's cached access tree.

        A user without roles has no cache entry at all.
        """
        role_ids = sorted(await self.roles.roles_by_user(user_id))
        if not role_ids:
            await self.cache.delete_access_list(user_id)
            logger.info(f"[RESOLVER] User {user_id} has no roles, access cache removed")
            return {}

        seen: TemplateCache = {}
        merged: ResolvedAccess = {}
        for role_id in role_ids:
            # Later roles replace the whole module entry.
            merged.update(await self._role_access(role_id, seen))

        ordered = {name: merged[name] for name in sorted(merged)}
        await self.cache.set_access_list(user_id, serialize_access(ordered))
        logger.debug(
            f"[RESOLVER] Cached access list for user {user_id}: {len(ordered)} modules from {len(role_ids)} roles"
        )
        return ordered

    @BaseService.measure_operation("resolve_actions")
    async def resolve_actions(self, user_id: str) -> ResolvedActions:
        """
        Recompute and overwrite the user's action lists and permission set.

        The per-module lists follow the same override order as the access
        tree. The permission set is the union of the actions every role
        allows, so a permission never disappears because another role
        happens to touch the same module.
        """
        role_ids = sorted(await self.roles.roles_by_user(user_id))
        if not role_ids:
            await self.cache.delete_action_lists(user_id)
            logger.info(f"[RESOLVER] User {user_id} has no roles, action cache removed")
            return ResolvedActions()

        seen: TemplateCache = {}
        merged: Dict[str, ResolvedModuleActions] = {}
        permissions: Set[str] = set()
        for role_id in role_ids:
            role_modules = await self._role_actions(role_id, seen)
            for module in role_modules.values():
                permissions |= module.allowed_actions()
            merged.update(role_modules)

        ordered = {name: merged[name] for name in sorted(merged)}
        await self.cache.replace_action_lists(
            user_id,
            {name: serialize_module_actions(module) for name, module in ordered.items()},
            permissions,
        )
        logger.debug(
            f"[RESOLVER] Cached action lists for user {user_id}: {len(ordered)} modules, {len(permissions)} permissions"
        )
        return ResolvedActions(modules=ordered, permissions=permissions)

    async def clear_access(self, user_id: str) -> None:
        await self.cache.delete_access_list(user_id)

    async def clear_actions(self, user_id: str) -> None:
        await self.cache.delete_action_lists(user_id)

    # Request-time reads (cache only)

    async def get_access_list(self, user_id: str) -> ResolvedAccess:
        validate_identifier(user_id, "user id")
        payload = await self.cache.get_access_list(user_id)
        if payload is None:
            raise NotFoundException(
                f"No access list cached for user {user_id}", code="ACCESS_LIST_NOT_FOUND"
            )
        raw: Dict[str, Any] = json.loads(payload)
        return {name: ResolvedModuleAccess.model_validate(module) for name, module in raw.items()}

    async def get_action_list_by_module(self, user_id: str, module: str) -> ResolvedModuleActions:
        validate_identifier(user_id, "user id")
        validate_identifier(module, "module")
        payload = await self.cache.get_action_list(user_id, module)
        if payload is None:
            raise NotFoundException(
                f"No action list cached for user {user_id} and module {module}",
                code="ACTION_LIST_NOT_FOUND",
            )
        return ResolvedModuleActions.model_validate_json(payload)

    async def check_permission(self, user_id: str, permission: str) -> bool:
        """
        Look the permission up in the flattened set.

        Never recomputes; a user without a cached set has no permissions.
        """
        if not permission:
            return False
        return await self.cache.has_permission(user_id, permission)
