# access_control/services/token_service.py
"""
Token Lifecycle Service

Issues access/refresh pairs, verifies them against the signature and the
session store, rotates them on refresh and revokes them on logout.
"""

from datetime import datetime, timezone
import logging
from typing import Optional

from ..auth import create_signed_token, decode_token
from ..core.config import Settings
from ..core.exceptions import (
    DomainException,
    InvalidTokenException,
    NotFoundException,
    ServiceException,
    StoreUnavailableException,
)
from ..core.keys import validate_identifier
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.session_repository import SessionRepository
from ..repositories.user_repository import UserRepository
from ..schemas.auth import LoggedUser, StoredSession, TokenKind, TokenPair
from .base import BaseService

logger = logging.getLogger(__name__)


class TokenService(BaseService):
    """Session token lifecycle backed by the key-value store."""

    def __init__(self, settings: Settings, sessions: SessionRepository, users: UserRepository):
        super().__init__()
        self.settings = settings
        self.sessions = sessions
        self.users = users

    @BaseService.measure_operation("create_token")
    async def create_token(self, user_id: str, *, now: Optional[datetime] = None) -> TokenPair:
        """Issue a fresh pair and record both identifiers with their token's TTL."""
        validate_identifier(user_id, "user id")
        issued_at = now or datetime.now(timezone.utc)
        access = create_signed_token(self.settings, user_id, TokenKind.ACCESS, now=issued_at)
        refresh = create_signed_token(self.settings, user_id, TokenKind.REFRESH, now=issued_at)
        session = StoredSession(
            user_id=user_id,
            access_uuid=access.token_uuid,
            access_expires_at=access.expires_at,
            refresh_uuid=refresh.token_uuid,
            refresh_expires_at=refresh.expires_at,
        )
        try:
            await self.sessions.store_session(session, now=issued_at)
        except ValueError as e:
            raise ServiceException(f"Could not store session: {str(e)}") from e
        prometheus_metrics.record_token_operation("create", "success")
        logger.info(f"[TOKENS] Issued token pair for user {user_id}")
        return TokenPair(access_token=access.token, refresh_token=refresh.token)

    @BaseService.measure_operation("verify_token")
    async def verify_token(self, access_token: str) -> str:
        """
        Return the user id of a live access token.

        Raises:
            InvalidTokenException: bad token, or its identifier was revoked or
                expired, or it belongs to another user
        """
        try:
            claims = decode_token(self.settings, access_token, TokenKind.ACCESS)
            stored = await self.sessions.get_user_id(claims.token_uuid)
            if stored is None or stored != claims.user_id:
                raise InvalidTokenException("Session has been revoked or has expired")
        except InvalidTokenException:
            prometheus_metrics.record_token_operation("verify", "rejected")
            raise
        prometheus_metrics.record_token_operation("verify", "success")
        return claims.user_id

    @BaseService.measure_operation("refresh_token")
    async def refresh_token(
        self, refresh_token: str, access_token: Optional[str] = None
    ) -> TokenPair:
        """
        Rotate a session: the refresh identifier is consumed, a new pair issued.

        The refresh identifier is read and deleted in one step, so a refresh
        token works at most once even under concurrent use. It is consumed
        before the new pair is stored: if that write fails the old refresh
        token is gone as well, and the caller gets an InvalidTokenException
        telling it to log in again.
        """
        try:
            claims = decode_token(self.settings, refresh_token, TokenKind.REFRESH)
            stored = await self.sessions.consume(claims.token_uuid)
            if stored is None or stored != claims.user_id:
                raise InvalidTokenException("Refresh token has been used, revoked or has expired")
        except InvalidTokenException:
            prometheus_metrics.record_token_operation("refresh", "rejected")
            raise

        if access_token:
            await self._revoke_previous_access(access_token, claims.user_id)

        try:
            pair = await self.create_token(claims.user_id)
        except StoreUnavailableException as e:
            prometheus_metrics.record_token_operation("refresh", "failed")
            logger.warning(
                f"[TOKENS] Refresh token of user {claims.user_id} consumed but new pair not stored: {e.message}"
            )
            raise InvalidTokenException(
                "Session could not be renewed, log in again",
                details={"reauthenticate": True},
            ) from e
        prometheus_metrics.record_token_operation("refresh", "success")
        logger.info(f"[TOKENS] Rotated session for user {claims.user_id}")
        return pair

    async def _revoke_previous_access(self, access_token: str, user_id: str) -> None:
        try:
            previous = decode_token(
                self.settings, access_token, TokenKind.ACCESS, verify_exp=False
            )
            if previous.user_id == user_id:
                await self.sessions.delete(previous.token_uuid)
        except DomainException as e:
            logger.debug(f"[TOKENS] Ignoring prior access token during refresh: {e.message}")

    @BaseService.measure_operation("logout")
    async def logout(
        self, access_token: Optional[str] = None, refresh_token: Optional[str] = None
    ) -> int:
        """
        Revoke whatever identifiers the given tokens carry.

        Undecodable, expired or already revoked tokens are skipped. Returns
        the number of identifiers removed.
        """
        removed = 0
        for token, kind in ((access_token, TokenKind.ACCESS), (refresh_token, TokenKind.REFRESH)):
            if not token:
                continue
            try:
                claims = decode_token(self.settings, token, kind, verify_exp=False)
            except InvalidTokenException as e:
                logger.debug(f"[TOKENS] Skipping {kind.value} token on logout: {e.message}")
                continue
            if await self.sessions.delete(claims.token_uuid):
                removed += 1
        prometheus_metrics.record_token_operation("logout", "success")
        logger.info(f"[TOKENS] Logout removed {removed} session identifiers")
        return removed

    @BaseService.measure_operation("login")
    async def login(self, email: str) -> LoggedUser:
        """Issue a pair for the user registered with ``email``."""
        user = await self.users.get_user_by_email(email)
        if user is None:
            prometheus_metrics.record_token_operation("login", "rejected")
            raise NotFoundException(f"No user registered with {email}", code="USER_NOT_FOUND")
        tokens = await self.create_token(user.id)
        prometheus_metrics.record_token_operation("login", "success")
        return LoggedUser(user=user, tokens=tokens)
