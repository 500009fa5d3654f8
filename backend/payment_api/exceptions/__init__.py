"""Domain exception taxonomy of the payment system."""

from __future__ import annotations

from .account import AccountNotFoundError, DuplicateResourceError, UserNotFoundError
from .base import PaymentSystemError
from .payment import (
    InsufficientFundsError,
    InvalidPaymentStatusError,
    PaymentNotFoundError,
    PaymentProcessingError,
)
from .security import AccessDeniedError, AuthenticationError, BadCredentialsError
from .validation import (
    ConstraintViolationError,
    DataIntegrityViolationError,
    ValidationFailedError,
)

__all__ = [
    "AccessDeniedError",
    "AccountNotFoundError",
    "AuthenticationError",
    "BadCredentialsError",
    "ConstraintViolationError",
    "DataIntegrityViolationError",
    "DuplicateResourceError",
    "InsufficientFundsError",
    "InvalidPaymentStatusError",
    "PaymentNotFoundError",
    "PaymentProcessingError",
    "PaymentSystemError",
    "UserNotFoundError",
    "ValidationFailedError",
]
