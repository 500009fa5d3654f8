from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from payment_api.core.integrity import (
    ConstraintKind,
    classify_integrity_text,
    integrity_message,
    resolve_constraint_kind,
)
from payment_api.exceptions import DataIntegrityViolationError


class _DriverError(Exception):
    """Stand-in for a DB-API driver exception exposing a SQLSTATE."""

    def __init__(self, message: str, *, sqlstate: str | None = None, pgcode: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.pgcode = pgcode


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("UPDATE accounts SET owner_id = ?", (1,), orig)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("UNIQUE constraint failed: users.email", ConstraintKind.UNIQUE),
        ('violates unique constraint "uq_accounts_number"', ConstraintKind.UNIQUE),
        ("FOREIGN KEY constraint failed", ConstraintKind.FOREIGN_KEY),
        ('violates foreign key constraint "fk_payment_account"', ConstraintKind.FOREIGN_KEY),
        ("CHECK constraint failed: amount_positive", ConstraintKind.OTHER),
        ("", ConstraintKind.OTHER),
        (None, ConstraintKind.OTHER),
    ],
)
def test_classify_integrity_text(text: str | None, expected: ConstraintKind) -> None:
    assert classify_integrity_text(text) is expected


def test_sqlstate_takes_precedence_over_text() -> None:
    exc = _integrity_error(_DriverError("unique-ish wording", sqlstate="23503"))

    assert resolve_constraint_kind(exc) is ConstraintKind.FOREIGN_KEY


def test_pgcode_is_read_when_sqlstate_missing() -> None:
    exc = _integrity_error(_DriverError("constraint failed", pgcode="23505"))

    assert resolve_constraint_kind(exc) is ConstraintKind.UNIQUE


def test_unknown_sqlstate_falls_back_to_text() -> None:
    exc = _integrity_error(_DriverError("violates foreign key constraint", sqlstate="23514"))

    assert resolve_constraint_kind(exc) is ConstraintKind.FOREIGN_KEY


def test_domain_error_uses_wrapped_storage_failure() -> None:
    storage_failure = _integrity_error(_DriverError("constraint failed", sqlstate="23505"))
    exc = DataIntegrityViolationError(cause=storage_failure)

    assert resolve_constraint_kind(exc) is ConstraintKind.UNIQUE
    assert integrity_message(exc) == "A record with this information already exists"


def test_domain_error_without_signal_is_generic() -> None:
    assert integrity_message(DataIntegrityViolationError()) == "Data integrity violation"


def test_statement_text_is_not_classified() -> None:
    exc = IntegrityError(
        "INSERT INTO payments (unique_reference, account_id) VALUES (?, ?)",
        ("REF-UNIQUE-1", 99),
        Exception('insert on table "payments" violates foreign key constraint "fk_account"'),
    )

    assert resolve_constraint_kind(exc) is ConstraintKind.FOREIGN_KEY
    assert integrity_message(exc) == "Referenced record does not exist"


def test_statement_text_alone_does_not_imply_unique() -> None:
    exc = IntegrityError(
        "UPDATE accounts SET unique_alias = ?",
        ("alias-unique",),
        Exception('null value in column "owner_id" violates not-null constraint'),
    )

    assert resolve_constraint_kind(exc) is ConstraintKind.OTHER
