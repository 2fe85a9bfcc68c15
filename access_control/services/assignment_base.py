# access_control/services/assignment_base.py
"""
Shared lookups for services that mutate role assignments.

Every mutation checks its references against the store and the template
before writing, then announces the change on the event bus.
"""

from typing import Iterable, List, Optional

from ..core.exceptions import NotFoundException, ValidationException
from ..core.keys import validate_identifier
from ..events.bus import RoleEventBus
from ..repositories.factory import Repositories
from ..schemas.rbac import RoleEventType
from ..schemas.template import TemplateModule, TemplateSubModule
from .base import BaseService

ACCESS_AND_ACTIONS = (RoleEventType.ACCESS, RoleEventType.ACTION)
ACCESS_ONLY = (RoleEventType.ACCESS,)
ACTIONS_ONLY = (RoleEventType.ACTION,)


class AssignmentService(BaseService):
    def __init__(self, repositories: Repositories, event_bus: RoleEventBus):
        super().__init__()
        self.repositories = repositories
        self.templates = repositories.templates
        self.roles = repositories.roles
        self.assignments = repositories.assignments
        self.users = repositories.users
        self.event_bus = event_bus

    async def _require_role(self, role_id: str) -> str:
        validate_identifier(role_id, "role id")
        if not await self.roles.role_exists(role_id):
            raise NotFoundException(f"Role {role_id} not found", code="ROLE_NOT_FOUND")
        return role_id

    async def _require_user(self, user_id: str) -> str:
        validate_identifier(user_id, "user id")
        if not await self.users.user_exists(user_id):
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user_id

    async def _require_module(self, module: str) -> TemplateModule:
        validate_identifier(module, "module")
        template = await self.templates.get_module(module)
        if template is None:
            raise NotFoundException(f"Module {module} not found", code="MODULE_NOT_FOUND")
        return template

    async def _require_submodule(self, module: str, submodule: str) -> TemplateSubModule:
        template = await self._require_module(module)
        validate_identifier(submodule, "submodule")
        found = template.submodule(submodule)
        if found is None:
            raise NotFoundException(
                f"Submodule {submodule} not found in module {module}",
                code="SUBMODULE_NOT_FOUND",
            )
        return found

    @staticmethod
    def _names(values: Iterable[str], kind: str) -> List[str]:
        """De-duplicate a non-empty list of names, keeping the caller's order."""
        names: List[str] = []
        for value in values:
            cleaned = (value or "").strip()
            if not cleaned:
                raise ValidationException(f"{kind} names must not be blank")
            if cleaned not in names:
                names.append(cleaned)
        if not names:
            raise ValidationException(f"At least one {kind} is required")
        return names

    def _publish(
        self,
        role_id: str,
        event_types: Iterable[RoleEventType],
        *,
        user_id: Optional[str] = None,
        user_ids: Iterable[str] = (),
    ) -> None:
        queued = self.event_bus.publish_role_change(
            role_id, event_types, user_id=user_id, user_ids=user_ids
        )
        self.logger.debug(f"[ROLE-EVENTS] Role {role_id} change queued {queued} events")
