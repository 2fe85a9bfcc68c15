# access_control/routes/v1/authorization.py
"""
Authorization routes

Users, role assignments, actions and the cached access lists, mounted
under /api/authorization. Reads here only ever hit the caches.

Endpoints:
    POST   /users                                         → Register a user
    GET    /users                                         → List users
    GET    /users/{user_id}                               → Get a user
    GET    /users/{user_id}/roles                         → Role ids of a user
    POST   /users/{user_id}/roles/{role_id}               → Assign a role
    DELETE /users/{user_id}/roles/{role_id}               → Unassign a role
    GET    /roles/{role_id}/users                         → Users holding a role
    GET    /actions/{role_id}                             → Actions assigned per submodule
    POST   /actions/{role_id}/modules/{module}/submodules/{submodule}             → Assign actions
    DELETE /actions/{role_id}/modules/{module}/submodules/{submodule}/{actions}  → Unassign actions
    GET    /users/{user_id}/access                        → Cached access tree
    GET    /users/{user_id}/actions/{module}              → Cached action list of a module
    GET    /users/{user_id}/permissions/check             → Fast-path permission check
    GET    /me/access                                     → Cached access tree of the caller
    GET    /me/actions/{module}                           → Cached action list of the caller
    GET    /me/permissions/check                          → Permission check for the caller
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import (
    get_access_list_service,
    get_authorization_service,
    get_current_user_id,
)
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.access import ResolvedModuleAccess, ResolvedModuleActions
from ...schemas.rbac import ActionList, PermissionCheckResponse, User
from ...services.access_list_service import AccessListService
from ...services.authorization_service import AuthorizationService
from .access import split_names

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authorization"])


# Users


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def add_user(
    payload: User,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> User:
    try:
        return await authorization.add_user(payload)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/users", response_model=List[User])
async def list_users(
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> List[User]:
    try:
        return await authorization.list_users()
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/users/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> User:
    try:
        return await authorization.get_user(user_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/roles/{role_id}/users", response_model=List[User])
async def list_users_by_role(
    role_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> List[User]:
    try:
        return await authorization.list_users_by_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


# Role <-> user


@router.get("/users/{user_id}/roles", response_model=List[str])
async def roles_by_user(
    user_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> List[str]:
    try:
        return await authorization.roles_by_user(user_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_role(
    user_id: str,
    role_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    try:
        await authorization.assign_role(user_id, role_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_role(
    user_id: str,
    role_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    try:
        await authorization.unassign_role(user_id, role_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


# Actions


@router.get("/actions/{role_id}", response_model=Dict[str, Dict[str, List[str]]])
async def actions_by_role(
    role_id: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Dict[str, Dict[str, List[str]]]:
    try:
        return await authorization.actions_by_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/actions/{role_id}/modules/{module}/submodules/{submodule}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def assign_actions(
    role_id: str,
    module: str,
    submodule: str,
    payload: ActionList,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    try:
        await authorization.assign_actions(role_id, module, submodule, payload.actions)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/actions/{role_id}/modules/{module}/submodules/{submodule}/{actions}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unassign_actions(
    role_id: str,
    module: str,
    submodule: str,
    actions: str,
    authorization: AuthorizationService = Depends(get_authorization_service),
) -> Response:
    try:
        await authorization.unassign_actions(role_id, module, submodule, split_names(actions))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


# Cached access lists


async def _access_list(
    access_lists: AccessListService, user_id: str
) -> Dict[str, ResolvedModuleAccess]:
    try:
        return await access_lists.get_access_list(user_id)
    except DomainException as e:
        handle_domain_exception(e)


async def _action_list(
    access_lists: AccessListService, user_id: str, module: str
) -> ResolvedModuleActions:
    try:
        return await access_lists.get_action_list_by_module(user_id, module)
    except DomainException as e:
        handle_domain_exception(e)


async def _check(
    access_lists: AccessListService, user_id: str, permission: str
) -> PermissionCheckResponse:
    try:
        allowed = await access_lists.check_permission(user_id, permission)
        return PermissionCheckResponse(user_id=user_id, permission=permission, allowed=allowed)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me/access", response_model=Dict[str, ResolvedModuleAccess])
async def my_access_list(
    user_id: str = Depends(get_current_user_id),
    access_lists: AccessListService = Depends(get_access_list_service),
) -> Dict[str, ResolvedModuleAccess]:
    return await _access_list(access_lists, user_id)


@router.get("/me/actions/{module}", response_model=ResolvedModuleActions)
async def my_action_list(
    module: str,
    user_id: str = Depends(get_current_user_id),
    access_lists: AccessListService = Depends(get_access_list_service),
) -> ResolvedModuleActions:
    return await _action_list(access_lists, user_id, module)


@router.get("/me/permissions/check", response_model=PermissionCheckResponse)
async def my_permission_check(
    permission: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    access_lists: AccessListService = Depends(get_access_list_service),
) -> PermissionCheckResponse:
    return await _check(access_lists, user_id, permission)


@router.get("/users/{user_id}/access", response_model=Dict[str, ResolvedModuleAccess])
async def access_list(
    user_id: str,
    access_lists: AccessListService = Depends(get_access_list_service),
) -> Dict[str, ResolvedModuleAccess]:
    return await _access_list(access_lists, user_id)


@router.get("/users/{user_id}/actions/{module}", response_model=ResolvedModuleActions)
async def action_list(
    user_id: str,
    module: str,
    access_lists: AccessListService = Depends(get_access_list_service),
) -> ResolvedModuleActions:
    return await _action_list(access_lists, user_id, module)


@router.get("/users/{user_id}/permissions/check", response_model=PermissionCheckResponse)
async def permission_check(
    user_id: str,
    permission: str = Query(..., min_length=1),
    access_lists: AccessListService = Depends(get_access_list_service),
) -> PermissionCheckResponse:
    return await _check(access_lists, user_id, permission)
