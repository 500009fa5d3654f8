"""Input and storage-constraint failures."""

from __future__ import annotations

from types import MappingProxyType
from typing import ClassVar, Mapping

from payment_api.core.codes import ErrorCode
from payment_api.core.integrity import ConstraintKind
from payment_api.exceptions.base import PaymentSystemError


class ValidationFailedError(PaymentSystemError):
    """One or more request fields violate their constraints.

    All violations are carried together so the client can fix them in a
    single round trip.
    """

    code: ClassVar[ErrorCode] = ErrorCode.VALIDATION_ERROR
    default_message: ClassVar[str | None] = "Invalid request parameters"

    def __init__(
        self,
        field_errors: Mapping[str, str],
        message: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        if not field_errors:
            raise ValueError(f"{type(self).__name__} requires at least one field error.")
        super().__init__(message, cause=cause)
        self.field_errors: Mapping[str, str] = MappingProxyType(dict(field_errors))

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationFailedError:
        return cls({field: message})

    @property
    def details(self) -> Mapping[str, str] | None:
        return self.field_errors


class ConstraintViolationError(ValidationFailedError):
    """Request parameters (path/query) violate declared constraints."""

    code: ClassVar[ErrorCode] = ErrorCode.CONSTRAINT_VIOLATION
    default_message: ClassVar[str | None] = "Data constraint violation"

    @property
    def violations(self) -> Mapping[str, str]:
        return self.field_errors


class DataIntegrityViolationError(PaymentSystemError):
    """A storage constraint was violated by an operation not validated up-front."""

    code: ClassVar[ErrorCode] = ErrorCode.DATA_INTEGRITY_VIOLATION
    default_message: ClassVar[str | None] = "Data integrity violation"

    def __init__(
        self,
        message: str | None = None,
        *,
        constraint_kind: ConstraintKind | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.constraint_kind = constraint_kind


__all__ = ["ConstraintViolationError", "DataIntegrityViolationError", "ValidationFailedError"]
