"""Failures related to accounts and users."""

from __future__ import annotations

from typing import ClassVar

from payment_api.core.codes import ErrorCode
from payment_api.exceptions.base import PaymentSystemError


class AccountNotFoundError(PaymentSystemError):
    code: ClassVar[ErrorCode] = ErrorCode.ACCOUNT_NOT_FOUND

    @classmethod
    def by_id(cls, account_id: object) -> AccountNotFoundError:
        return cls(f"Account not found with ID: {account_id}")

    @classmethod
    def by_account_number(cls, account_number: str) -> AccountNotFoundError:
        return cls(f"Account not found with account number: {account_number}")


class UserNotFoundError(PaymentSystemError):
    code: ClassVar[ErrorCode] = ErrorCode.USER_NOT_FOUND

    @classmethod
    def by_id(cls, user_id: object) -> UserNotFoundError:
        return cls(f"User not found with ID: {user_id}")

    @classmethod
    def by_username(cls, username: str) -> UserNotFoundError:
        return cls(f"User not found with username: {username}")

    @classmethod
    def by_email(cls, email: str) -> UserNotFoundError:
        return cls(f"User not found with email: {email}")


class DuplicateResourceError(PaymentSystemError):
    """Caller-supplied data collides with an existing unique resource."""

    code: ClassVar[ErrorCode] = ErrorCode.DUPLICATE_RESOURCE

    @classmethod
    def for_field(cls, resource: str, field: str, value: object) -> DuplicateResourceError:
        return cls(f"{resource} already exists with {field}: {value}")


__all__ = ["AccountNotFoundError", "DuplicateResourceError", "UserNotFoundError"]
