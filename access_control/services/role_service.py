# access_control/services/role_service.py
"""
Role Service

Role records and the module/submodule/section assignments of each role.
Every successful write publishes the invalidation events for the facets it
touched; callers never wait for the caches to be recomputed.
"""

import logging
from typing import Dict, List, Sequence

from ..core.exceptions import NotFoundException, ValidationException
from ..schemas.rbac import Role
from .assignment_base import ACCESS_AND_ACTIONS, ACCESS_ONLY, AssignmentService
from .base import BaseService

logger = logging.getLogger(__name__)


class RoleService(AssignmentService):
    """Manages roles and their module, submodule and section assignments."""

    # Roles

    @staticmethod
    def _role_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationException("Role name must not be blank", details={"field": "name"})
        return cleaned

    @BaseService.measure_operation("add_role")
    async def add_role(self, name: str) -> Role:
        cleaned = self._role_name(name)
        role = Role(id=await self.roles.add_role(cleaned), name=cleaned)
        logger.info(f"Created role {role.id} ({role.name})")
        return role

    @BaseService.measure_operation("edit_role")
    async def edit_role(self, role_id: str, name: str) -> Role:
        await self._require_role(role_id)
        cleaned = self._role_name(name)
        await self.roles.edit_role(role_id, cleaned)
        return Role(id=role_id, name=cleaned)

    @BaseService.measure_operation("delete_role")
    async def delete_role(self, role_id: str) -> List[str]:
        """
        Delete a role with every assignment stored under it.

        Returns the users that held the role; they travel with the events
        because the reverse index no longer exists when the listeners run.
        """
        await self._require_role(role_id)
        user_ids = await self.roles.delete_role(role_id)
        self._publish(role_id, ACCESS_AND_ACTIONS, user_ids=user_ids)
        logger.info(f"Deleted role {role_id} held by {len(user_ids)} users")
        return user_ids

    async def get_role(self, role_id: str) -> Role:
        await self._require_role(role_id)
        role = await self.roles.get_role(role_id)
        if role is None:
            raise NotFoundException(f"Role {role_id} not found", code="ROLE_NOT_FOUND")
        return role

    async def list_roles(self) -> List[Role]:
        return await self.roles.list_roles()

    async def role_exists(self, role_id: str) -> bool:
        return await self.roles.role_exists(role_id)

    # Modules

    @BaseService.measure_operation("assign_modules")
    async def assign_modules(self, role_id: str, modules: Sequence[str]) -> None:
        await self._require_role(role_id)
        names = self._names(modules, "module")
        for module in names:
            await self._require_module(module)
        await self.assignments.assign_modules(role_id, names)
        self._publish(role_id, ACCESS_AND_ACTIONS)

    @BaseService.measure_operation("unassign_modules")
    async def unassign_modules(self, role_id: str, modules: Sequence[str]) -> None:
        """
        Remove modules from a role.

        Submodule, section and action assignments below the module are kept;
        they have no effect until the module is assigned again.
        """
        await self._require_role(role_id)
        names = self._names(modules, "module")
        for module in names:
            await self._require_module(module)
        await self.assignments.unassign_modules(role_id, names)
        self._publish(role_id, ACCESS_AND_ACTIONS)

    async def modules_by_role(self, role_id: str) -> List[str]:
        await self._require_role(role_id)
        return sorted(await self.assignments.modules(role_id))

    # Submodules

    @BaseService.measure_operation("assign_submodules")
    async def assign_submodules(
        self, role_id: str, module: str, submodules: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = self._names(submodules, "submodule")
        for submodule in names:
            await self._require_submodule(module, submodule)
        await self.assignments.assign_submodules(role_id, module, names)
        self._publish(role_id, ACCESS_AND_ACTIONS)

    @BaseService.measure_operation("unassign_submodules")
    async def unassign_submodules(
        self, role_id: str, module: str, submodules: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = self._names(submodules, "submodule")
        for submodule in names:
            await self._require_submodule(module, submodule)
        await self.assignments.unassign_submodules(role_id, module, names)
        self._publish(role_id, ACCESS_AND_ACTIONS)

    async def submodules_by_role(self, role_id: str) -> Dict[str, List[str]]:
        await self._require_role(role_id)
        return await self.assignments.submodules_by_role(role_id)

    # Sections

    async def _require_sections(
        self, module: str, submodule: str, sections: Sequence[str]
    ) -> List[str]:
        template = await self._require_submodule(module, submodule)
        names = self._names(sections, "section")
        for section in names:
            if section not in template.sections:
                raise NotFoundException(
                    f"Section {section} not found in {module}/{submodule}",
                    code="SECTION_NOT_FOUND",
                )
        return names

    @BaseService.measure_operation("assign_sections")
    async def assign_sections(
        self, role_id: str, module: str, submodule: str, sections: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = await self._require_sections(module, submodule, sections)
        await self.assignments.assign_sections(role_id, module, submodule, names)
        self._publish(role_id, ACCESS_ONLY)

    @BaseService.measure_operation("unassign_sections")
    async def unassign_sections(
        self, role_id: str, module: str, submodule: str, sections: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = await self._require_sections(module, submodule, sections)
        await self.assignments.unassign_sections(role_id, module, submodule, names)
        self._publish(role_id, ACCESS_ONLY)

    async def sections_by_role(self, role_id: str) -> Dict[str, Dict[str, List[str]]]:
        await self._require_role(role_id)
        return await self.assignments.sections_by_role(role_id)
