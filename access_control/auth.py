# access_control/auth.py
"""
Signed session tokens.

Tokens are HS256 JWTs carrying ``user_id``, one session identifier claim
(``access_uuid`` or ``refresh_uuid``), the token ``type`` and ``iat``/``exp``.
Decoding always yields a fully populated ``TokenClaims``; a token missing any
claim is rejected, never soft-passed.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast
import uuid

import jwt
from jwt import PyJWTError
from pydantic import ValidationError

from .core.config import Settings
from .core.exceptions import InvalidTokenException
from .schemas.auth import IssuedToken, TokenClaims, TokenKind

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["user_id", "type", "exp"]


def _lifetime(settings: Settings, kind: TokenKind) -> timedelta:
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(minutes=settings.refresh_token_expire_minutes)


def new_token_uuid() -> str:
    return str(uuid.uuid4())


def create_signed_token(
    settings: Settings,
    user_id: str,
    kind: TokenKind,
    *,
    token_uuid: Optional[str] = None,
    now: Optional[datetime] = None,
) -> IssuedToken:
    """
    Sign a token of the given kind for ``user_id``.

    Args:
        settings: Supplies the secret, the algorithm and the lifetimes
        user_id: Identity the token is issued to
        kind: Access or refresh
        token_uuid: Session identifier to embed (generated when omitted)
        now: Issue time, defaults to the current UTC time

    Returns:
        IssuedToken: The encoded token with its identifier and expiry
    """
    issued_at = now or datetime.now(timezone.utc)
    # JWT timestamps have second precision.
    issued_at = issued_at.replace(microsecond=0)
    expires_at = issued_at + _lifetime(settings, kind)
    identifier = token_uuid or new_token_uuid()
    to_encode: Dict[str, Any] = {
        "user_id": user_id,
        kind.uuid_claim: identifier,
        "type": kind.value,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(to_encode, settings.secret_value(), algorithm=settings.algorithm)
    return IssuedToken(token=token, token_uuid=identifier, expires_at=expires_at)


def decode_token(
    settings: Settings,
    token: str,
    kind: TokenKind,
    *,
    verify_exp: bool = True,
) -> TokenClaims:
    """
    Verify signature and algorithm and return the typed claim set.

    Raises:
        InvalidTokenException: bad signature, wrong algorithm, expired token,
            missing claims or a token of the other kind
    """
    if not token:
        raise InvalidTokenException("Token is missing")
    try:
        payload = cast(
            Dict[str, Any],
            jwt.decode(
                token,
                settings.secret_value(),
                algorithms=[settings.algorithm],
                options={"require": REQUIRED_CLAIMS, "verify_exp": verify_exp},
            ),
        )
    except PyJWTError as e:
        logger.debug(f"[TOKENS] Rejected {kind.value} token: {str(e)}")
        raise InvalidTokenException() from e

    if payload.get("type") != kind.value:
        raise InvalidTokenException(f"Expected a {kind.value} token")

    user_id = payload.get("user_id")
    token_uuid = payload.get(kind.uuid_claim)
    if not isinstance(user_id, str) or not isinstance(token_uuid, str):
        raise InvalidTokenException("Token is missing required claims")

    try:
        return TokenClaims(
            user_id=user_id,
            token_uuid=token_uuid,
            kind=kind,
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (ValidationError, TypeError, ValueError) as e:
        raise InvalidTokenException("Token is missing required claims") from e
