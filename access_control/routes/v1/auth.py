# access_control/routes/v1/auth.py
"""
Authentication routes

Session token lifecycle, mounted under /api/auth.

Endpoints:
    POST /login           → Issue a token pair for a registered email
    POST /token/verify    → Resolve an access token to its user id
    POST /token/refresh   → Rotate a session (refresh token is single use)
    POST /logout          → Revoke the given tokens
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_token_service
from ...core.exceptions import DomainException, InvalidTokenException, handle_domain_exception
from ...schemas.auth import LoggedUser, LogoutResponse, TokenPair
from ...schemas.rbac import LoginRequest, TokenRequest, VerifyResponse
from ...services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoggedUser)
async def login(
    payload: LoginRequest,
    token_service: TokenService = Depends(get_token_service),
) -> LoggedUser:
    try:
        return await token_service.login(str(payload.email))
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/token/verify", response_model=VerifyResponse)
async def verify_token(
    payload: TokenRequest,
    token_service: TokenService = Depends(get_token_service),
) -> VerifyResponse:
    try:
        if not payload.access_token:
            raise InvalidTokenException("access_token is required")
        user_id = await token_service.verify_token(payload.access_token)
        return VerifyResponse(user_id=user_id)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/token/refresh", response_model=TokenPair)
async def refresh_token(
    payload: TokenRequest,
    token_service: TokenService = Depends(get_token_service),
) -> TokenPair:
    """
    Exchange a refresh token for a new pair.

    The previous access token, when sent along, is revoked as well.
    """
    try:
        if not payload.refresh_token:
            raise InvalidTokenException("refresh_token is required")
        return await token_service.refresh_token(payload.refresh_token, payload.access_token)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    payload: TokenRequest,
    token_service: TokenService = Depends(get_token_service),
) -> LogoutResponse:
    try:
        removed = await token_service.logout(payload.access_token, payload.refresh_token)
        return LogoutResponse(removed=removed)
    except DomainException as e:
        handle_domain_exception(e)
