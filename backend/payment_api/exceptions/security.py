"""Authentication and authorization failures.

Clients always receive fixed wording for these; the specific reason
(expired token, malformed signature, ...) is only logged.
"""

from __future__ import annotations

from typing import ClassVar

from payment_api.core.codes import ErrorCode
from payment_api.exceptions.base import PaymentSystemError


class AuthenticationError(PaymentSystemError):
    """Caller identity could not be established."""

    code: ClassVar[ErrorCode] = ErrorCode.AUTHENTICATION_ERROR
    default_message: ClassVar[str | None] = "Authentication failed"


class BadCredentialsError(AuthenticationError):
    """Username/password pair was rejected."""

    code: ClassVar[ErrorCode] = ErrorCode.BAD_CREDENTIALS
    default_message: ClassVar[str | None] = "Invalid username or password"


class AccessDeniedError(PaymentSystemError):
    """Caller is authenticated but lacks permission for the operation."""

    code: ClassVar[ErrorCode] = ErrorCode.ACCESS_DENIED
    default_message: ClassVar[str | None] = "Access denied"


__all__ = ["AccessDeniedError", "AuthenticationError", "BadCredentialsError"]
