# access_control/routes/v1/access.py
"""
Access routes

Roles and their module, submodule and section assignments, mounted under
/api/access. All business logic delegated to RoleService.

Endpoints:
    POST   /roles                                         → Create a role
    GET    /roles                                         → List roles
    GET    /roles/{role_id}                               → Get a role
    PUT    /roles/{role_id}                               → Rename a role
    DELETE /roles/{role_id}                               → Delete a role
    GET    /roles/{role_id}/access                        → Access tree the role grants
    GET    /modules                                       → Template module names
    GET    /template/{module}                             → Template tree of a module
    GET    /modules/{role_id}                             → Modules assigned to a role
    POST   /modules/{role_id}                             → Assign modules
    DELETE /modules/{role_id}/{modules}                   → Unassign modules (comma separated)
    GET    /submodules/{role_id}                          → Submodules assigned per module
    POST   /submodules/{role_id}/modules/{module}         → Assign submodules
    DELETE /submodules/{role_id}/modules/{module}/{subs}  → Unassign submodules
    GET    /sections/{role_id}                            → Sections assigned per submodule
    POST   /sections/{role_id}/modules/{module}/submodules/{submodule}             → Assign sections
    DELETE /sections/{role_id}/modules/{module}/submodules/{submodule}/{sections}  → Unassign sections
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Response, status

from ...api.dependencies import (
    get_access_list_service,
    get_role_service,
    get_template_service,
)
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.access import ResolvedModuleAccess
from ...schemas.rbac import (
    IDResponse,
    ModuleList,
    Role,
    RoleCreate,
    RoleUpdate,
    SectionList,
    SubModuleList,
)
from ...schemas.template import TemplateModule
from ...services.access_list_service import AccessListService
from ...services.role_service import RoleService
from ...services.template_service import TemplateService

logger = logging.getLogger(__name__)

# No prefix here, added when mounting in main.py
router = APIRouter(tags=["access"])


def split_names(raw: str) -> List[str]:
    """Split a comma separated path segment into names."""
    return [part.strip() for part in raw.split(",") if part.strip()]


# Roles


@router.post("/roles", response_model=IDResponse, status_code=status.HTTP_201_CREATED)
async def add_role(
    payload: RoleCreate,
    role_service: RoleService = Depends(get_role_service),
) -> IDResponse:
    try:
        role = await role_service.add_role(payload.name)
        return IDResponse(id=role.id)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/roles", response_model=List[Role])
async def list_roles(role_service: RoleService = Depends(get_role_service)) -> List[Role]:
    try:
        return await role_service.list_roles()
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/roles/{role_id}", response_model=Role)
async def get_role(
    role_id: str,
    role_service: RoleService = Depends(get_role_service),
) -> Role:
    try:
        return await role_service.get_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/roles/{role_id}", response_model=Role)
async def edit_role(
    role_id: str,
    payload: RoleUpdate,
    role_service: RoleService = Depends(get_role_service),
) -> Role:
    try:
        return await role_service.edit_role(role_id, payload.name)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    """
    Delete a role, its assignments and its user links.

    Caches of the affected users are rebuilt in the background.
    """
    try:
        await role_service.delete_role(role_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/roles/{role_id}/access", response_model=Dict[str, ResolvedModuleAccess])
async def role_access_list(
    role_id: str,
    access_lists: AccessListService = Depends(get_access_list_service),
) -> Dict[str, ResolvedModuleAccess]:
    try:
        return await access_lists.role_access_list(role_id)
    except DomainException as e:
        handle_domain_exception(e)


# Template


@router.get("/modules", response_model=List[str])
async def list_modules(
    template_service: TemplateService = Depends(get_template_service),
) -> List[str]:
    try:
        return await template_service.list_modules()
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/template/{module}", response_model=TemplateModule)
async def module_structure(
    module: str,
    template_service: TemplateService = Depends(get_template_service),
) -> TemplateModule:
    try:
        return await template_service.module_structure(module)
    except DomainException as e:
        handle_domain_exception(e)


# Modules


@router.get("/modules/{role_id}", response_model=List[str])
async def modules_by_role(
    role_id: str,
    role_service: RoleService = Depends(get_role_service),
) -> List[str]:
    try:
        return await role_service.modules_by_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/modules/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_modules(
    role_id: str,
    payload: ModuleList,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.assign_modules(role_id, payload.modules)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/modules/{role_id}/{modules}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_modules(
    role_id: str,
    modules: str,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.unassign_modules(role_id, split_names(modules))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


# Submodules


@router.get("/submodules/{role_id}", response_model=Dict[str, List[str]])
async def submodules_by_role(
    role_id: str,
    role_service: RoleService = Depends(get_role_service),
) -> Dict[str, List[str]]:
    try:
        return await role_service.submodules_by_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/submodules/{role_id}/modules/{module}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_submodules(
    role_id: str,
    module: str,
    payload: SubModuleList,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.assign_submodules(role_id, module, payload.submodules)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/submodules/{role_id}/modules/{module}/{submodules}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unassign_submodules(
    role_id: str,
    module: str,
    submodules: str,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.unassign_submodules(role_id, module, split_names(submodules))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


# Sections


@router.get("/sections/{role_id}", response_model=Dict[str, Dict[str, List[str]]])
async def sections_by_role(
    role_id: str,
    role_service: RoleService = Depends(get_role_service),
) -> Dict[str, Dict[str, List[str]]]:
    try:
        return await role_service.sections_by_role(role_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/sections/{role_id}/modules/{module}/submodules/{submodule}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def assign_sections(
    role_id: str,
    module: str,
    submodule: str,
    payload: SectionList,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.assign_sections(role_id, module, submodule, payload.sections)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/sections/{role_id}/modules/{module}/submodules/{submodule}/{sections}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def unassign_sections(
    role_id: str,
    module: str,
    submodule: str,
    sections: str,
    role_service: RoleService = Depends(get_role_service),
) -> Response:
    try:
        await role_service.unassign_sections(role_id, module, submodule, split_names(sections))
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
