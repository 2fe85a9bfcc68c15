# access_control/services/authorization_service.py
"""
Authorization Service

Users, role <-> user assignments and the action assignments of roles.
"""

import logging
from typing import Dict, List, Sequence

from ..core.exceptions import NotFoundException, ValidationException
from ..core.keys import validate_identifier, validate_identifiers
from ..schemas.rbac import User
from .assignment_base import ACCESS_AND_ACTIONS, ACTIONS_ONLY, AssignmentService
from .base import BaseService

logger = logging.getLogger(__name__)


class AuthorizationService(AssignmentService):
    """Manages users, their roles and the actions a role allows."""

    # Users

    @BaseService.measure_operation("add_user")
    async def add_user(self, user: User) -> User:
        validate_identifier(user.id, "user id")
        if await self.users.user_exists(user.id):
            raise ValidationException(
                f"User {user.id} already exists", code="USER_EXISTS", details={"field": "id"}
            )
        if await self.users.get_user_id_by_email(str(user.email)):
            raise ValidationException(
                f"Email {user.email} is already registered",
                code="EMAIL_EXISTS",
                details={"field": "email"},
            )
        await self.users.add_user(user)
        logger.info(f"Added user {user.id}")
        return user

    async def get_user(self, user_id: str) -> User:
        validate_identifier(user_id, "user id")
        user = await self.users.get_user(user_id)
        if user is None:
            raise NotFoundException(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self.users.get_user_by_email(email)
        if user is None:
            raise NotFoundException(f"No user registered with {email}", code="USER_NOT_FOUND")
        return user

    async def user_exists(self, user_id: str) -> bool:
        return await self.users.user_exists(user_id)

    async def list_users(self) -> List[User]:
        return await self.users.list_users()

    async def list_users_by_role(self, role_id: str) -> List[User]:
        await self._require_role(role_id)
        users: List[User] = []
        for user_id in await self.roles.users_by_role(role_id):
            user = await self.users.get_user(user_id)
            if user is not None:
                users.append(user)
        return users

    # Role <-> user

    @BaseService.measure_operation("assign_roles")
    async def assign_roles(self, user_id: str, role_ids: Sequence[str]) -> None:
        await self._require_user(user_id)
        ids = sorted(set(validate_identifiers(role_ids, "role id")))
        for role_id in ids:
            await self._require_role(role_id)
        await self.roles.assign_roles(user_id, ids)
        for role_id in ids:
            self._publish(role_id, ACCESS_AND_ACTIONS, user_id=user_id)
        logger.info(f"Assigned roles {ids} to user {user_id}")

    @BaseService.measure_operation("unassign_roles")
    async def unassign_roles(self, user_id: str, role_ids: Sequence[str]) -> None:
        await self._require_user(user_id)
        ids = sorted(set(validate_identifiers(role_ids, "role id")))
        for role_id in ids:
            await self._require_role(role_id)
        await self.roles.unassign_roles(user_id, ids)
        for role_id in ids:
            self._publish(role_id, ACCESS_AND_ACTIONS, user_id=user_id)
        logger.info(f"Unassigned roles {ids} from user {user_id}")

    async def assign_role(self, user_id: str, role_id: str) -> None:
        await self.assign_roles(user_id, [role_id])

    async def unassign_role(self, user_id: str, role_id: str) -> None:
        await self.unassign_roles(user_id, [role_id])

    async def roles_by_user(self, user_id: str) -> List[str]:
        await self._require_user(user_id)
        return await self.roles.roles_by_user(user_id)

    # Actions

    async def _require_actions(
        self, module: str, submodule: str, actions: Sequence[str]
    ) -> List[str]:
        template = await self._require_submodule(module, submodule)
        names = self._names(actions, "action")
        for action in names:
            if template.action(action) is None:
                raise NotFoundException(
                    f"Action {action} not found in {module}/{submodule}",
                    code="ACTION_NOT_FOUND",
                )
        return names

    @BaseService.measure_operation("assign_actions")
    async def assign_actions(
        self, role_id: str, module: str, submodule: str, actions: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = await self._require_actions(module, submodule, actions)
        await self.assignments.assign_actions(role_id, module, submodule, names)
        self._publish(role_id, ACTIONS_ONLY)

    @BaseService.measure_operation("unassign_actions")
    async def unassign_actions(
        self, role_id: str, module: str, submodule: str, actions: Sequence[str]
    ) -> None:
        await self._require_role(role_id)
        names = await self._require_actions(module, submodule, actions)
        await self.assignments.unassign_actions(role_id, module, submodule, names)
        self._publish(role_id, ACTIONS_ONLY)

    async def actions_by_role(self, role_id: str) -> Dict[str, Dict[str, List[str]]]:
        await self._require_role(role_id)
        return await self.assignments.actions_by_role(role_id)
