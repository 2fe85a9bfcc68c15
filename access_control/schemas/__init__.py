"""
Pydantic schemas for the access-control engine.
"""

from .access import (
    ActionState,
    ResolvedAccess,
    ResolvedActions,
    ResolvedModuleAccess,
    ResolvedModuleActions,
    ResolvedSubModuleAccess,
    ResolvedSubModuleActions,
)
from .auth import (
    IssuedToken,
    LoggedUser,
    LogoutResponse,
    StoredSession,
    TokenClaims,
    TokenKind,
    TokenPair,
)
from .rbac import Role, RoleEventType, User
from .template import TemplateAction, TemplateModule, TemplateSubModule

__all__ = [
    "ActionState",
    "IssuedToken",
    "LoggedUser",
    "LogoutResponse",
    "ResolvedAccess",
    "ResolvedActions",
    "ResolvedModuleAccess",
    "ResolvedModuleActions",
    "ResolvedSubModuleAccess",
    "ResolvedSubModuleActions",
    "Role",
    "RoleEventType",
    "StoredSession",
    "TemplateAction",
    "TemplateModule",
    "TemplateSubModule",
    "TokenClaims",
    "TokenKind",
    "TokenPair",
    "User",
]
