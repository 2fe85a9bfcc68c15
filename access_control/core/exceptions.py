# access_control/core/exceptions.py
"""
Domain-specific exceptions for the access-control engine.

These exceptions carry a business-focused message and are converted to
HTTP errors only at the API layer.
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when a mutation carries malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a role, user, module or token is unknown."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class InvalidTokenException(UnauthorizedException):
    """
    Raised for bad signatures, wrong algorithms, missing claims and
    revoked or expired session identifiers.
    """

    def __init__(
        self,
        message: str = "Invalid or expired token",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code="INVALID_TOKEN", details=details)


class ServiceException(DomainException):
    """Raised when a service operation fails."""


class StoreUnavailableException(ServiceException):
    """Raised when an operation against the key-value store fails."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str, reason: Optional[str] = None) -> None:
        super().__init__(
            message=f"Store operation failed: {operation}",
            code="STORE_UNAVAILABLE",
            details={"operation": operation, "reason": reason} if reason else {"operation": operation},
        )


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
