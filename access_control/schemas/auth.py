# access_control/schemas/auth.py
"""Session token schemas."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field

from .base import StandardizedModel
from .rbac import User


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"

    @property
    def uuid_claim(self) -> str:
        return f"{self.value}_uuid"


class TokenClaims(StandardizedModel):
    """Decoded, validated claim set of a signed session token."""

    model_config = ConfigDict(use_enum_values=False, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    token_uuid: str = Field(..., min_length=1)
    kind: TokenKind
    expires_at: datetime


class IssuedToken(StandardizedModel):
    token: str
    token_uuid: str
    expires_at: datetime


class TokenPair(StandardizedModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class StoredSession(StandardizedModel):
    """The server-side half of a token pair: identifiers and expiries."""

    user_id: str
    access_uuid: str
    access_expires_at: datetime
    refresh_uuid: str
    refresh_expires_at: datetime


class LoggedUser(StandardizedModel):
    user: User
    tokens: TokenPair


class LogoutResponse(StandardizedModel):
    removed: int = 0
