# access_control/schemas/rbac.py
"""Role, user and assignment request schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import EmailStr, Field

from .base import StandardizedModel, StrictModel
from .template import IDENTIFIER_PATTERN


class RoleEventType(str, Enum):
    """Event class of a cache invalidation event."""

    ACCESS = "access"
    ACTION = "action"


class Role(StandardizedModel):
    id: str
    name: str


class User(StandardizedModel):
    id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    email: EmailStr
    name: str = Field(..., min_length=1)
    is_admin: bool = False


class RoleCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=100)


class RoleUpdate(StrictModel):
    name: str = Field(..., min_length=1, max_length=100)


class ModuleList(StrictModel):
    modules: List[str] = Field(..., min_length=1)


class SubModuleList(StrictModel):
    submodules: List[str] = Field(..., min_length=1)


class SectionList(StrictModel):
    sections: List[str] = Field(..., min_length=1)


class ActionList(StrictModel):
    actions: List[str] = Field(..., min_length=1)


class IDResponse(StandardizedModel):
    id: str


class PermissionCheckResponse(StandardizedModel):
    user_id: str
    permission: str
    allowed: bool


class LoginRequest(StrictModel):
    email: EmailStr


class TokenRequest(StrictModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class VerifyResponse(StandardizedModel):
    user_id: str
