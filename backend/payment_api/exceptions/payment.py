"""Failures raised while looking up, processing or settling payments."""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar

from payment_api.core.codes import ErrorCode
from payment_api.exceptions.base import PaymentSystemError


class PaymentNotFoundError(PaymentSystemError):
    """Referenced payment does not exist."""

    code: ClassVar[ErrorCode] = ErrorCode.PAYMENT_NOT_FOUND

    @classmethod
    def by_id(cls, payment_id: object) -> PaymentNotFoundError:
        return cls(f"Payment not found with ID: {payment_id}")

    @classmethod
    def by_reference(cls, reference: str) -> PaymentNotFoundError:
        return cls(f"Payment not found with reference: {reference}")


class PaymentProcessingError(PaymentSystemError):
    """Payment could not be processed, refunded or cancelled."""

    code: ClassVar[ErrorCode] = ErrorCode.PAYMENT_PROCESSING_ERROR

    @classmethod
    def for_state(cls, action: str, status: object) -> PaymentProcessingError:
        # e.g. for_state("refunded", "PENDING")
        return cls(f"Payment cannot be {action} in current state: {status}")


class InsufficientFundsError(PaymentSystemError):
    """Debit exceeds the available balance of the source account.

    Both amounts are kept as ``Decimal`` and may be disclosed to the caller,
    who already supplied the requested amount.
    """

    code: ClassVar[ErrorCode] = ErrorCode.INSUFFICIENT_FUNDS

    def __init__(
        self,
        message: str | None = None,
        *,
        available_balance: Decimal | None = None,
        requested_amount: Decimal | None = None,
        cause: BaseException | None = None,
    ) -> None:
        if message is None and available_balance is not None and requested_amount is not None:
            message = (
                f"Insufficient funds. Available: {available_balance}, "
                f"Requested: {requested_amount}"
            )
        super().__init__(message, cause=cause)
        self.available_balance = available_balance
        self.requested_amount = requested_amount

    @classmethod
    def for_amounts(
        cls,
        available_balance: Decimal | str | int,
        requested_amount: Decimal | str | int,
    ) -> InsufficientFundsError:
        return cls(
            available_balance=_to_amount(available_balance),
            requested_amount=_to_amount(requested_amount),
        )


def _to_amount(value: Decimal | str | int) -> Decimal:
    # A float has already lost the scale the message must show.
    if isinstance(value, float):
        raise TypeError(f"Monetary amounts must be Decimal, str or int, got float {value!r}.")
    return Decimal(value)


class InvalidPaymentStatusError(PaymentSystemError):
    """Operation not permitted in the payment's current lifecycle state."""

    code: ClassVar[ErrorCode] = ErrorCode.INVALID_PAYMENT_STATUS

    @classmethod
    def for_transition(cls, current: object, target: object) -> InvalidPaymentStatusError:
        return cls(f"Cannot change payment status from {current} to {target}")


__all__ = [
    "InsufficientFundsError",
    "InvalidPaymentStatusError",
    "PaymentNotFoundError",
    "PaymentProcessingError",
]
