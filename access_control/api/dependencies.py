# access_control/api/dependencies.py
"""
Dependency providers for the routers.

The application factory stores one ``AccessControl`` on ``app.state``; these
providers hand its services to the route handlers.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..container import AccessControl
from ..core.exceptions import DomainException, InvalidTokenException, handle_domain_exception
from ..services.access_list_service import AccessListService
from ..services.authorization_service import AuthorizationService
from ..services.role_service import RoleService
from ..services.template_service import TemplateService
from ..services.token_service import TokenService

bearer_scheme = HTTPBearer(auto_error=False)


def get_access_control(request: Request) -> AccessControl:
    return request.app.state.access_control


def get_role_service(ac: AccessControl = Depends(get_access_control)) -> RoleService:
    return ac.roles


def get_authorization_service(
    ac: AccessControl = Depends(get_access_control),
) -> AuthorizationService:
    return ac.authorization


def get_access_list_service(
    ac: AccessControl = Depends(get_access_control),
) -> AccessListService:
    return ac.access_lists


def get_token_service(ac: AccessControl = Depends(get_access_control)) -> TokenService:
    return ac.tokens


def get_template_service(ac: AccessControl = Depends(get_access_control)) -> TemplateService:
    return ac.templates


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the bearer access token to a user id (401 otherwise)."""
    try:
        if credentials is None or not credentials.credentials:
            raise InvalidTokenException("Not authenticated")
        return await token_service.verify_token(credentials.credentials)
    except DomainException as e:
        handle_domain_exception(e)
