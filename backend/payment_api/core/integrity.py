"""Classify storage-layer constraint failures into client-facing wording.

Preference order: an explicit ``constraint_kind`` carried by the failure,
then the SQLSTATE exposed by the DB-API driver behind a SQLAlchemy
``IntegrityError``, and only then a case-insensitive sniff of the error
text. The text sniff is best effort; driver wording is not a contract.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Mapping

from sqlalchemy.exc import DBAPIError


class ConstraintKind(StrEnum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"


UNIQUE_VIOLATION_SQLSTATE: Final[str] = "23505"
FOREIGN_KEY_VIOLATION_SQLSTATE: Final[str] = "23503"

_SQLSTATE_KINDS: Final[Mapping[str, ConstraintKind]] = {
    UNIQUE_VIOLATION_SQLSTATE: ConstraintKind.UNIQUE,
    FOREIGN_KEY_VIOLATION_SQLSTATE: ConstraintKind.FOREIGN_KEY,
}

INTEGRITY_MESSAGES: Final[Mapping[ConstraintKind, str]] = {
    ConstraintKind.UNIQUE: "A record with this information already exists",
    ConstraintKind.FOREIGN_KEY: "Referenced record does not exist",
    ConstraintKind.OTHER: "Data integrity violation",
}


def resolve_constraint_kind(exc: BaseException) -> ConstraintKind:
    """Return the best available constraint kind for an integrity failure."""

    explicit = getattr(exc, "constraint_kind", None)
    if isinstance(explicit, ConstraintKind):
        return explicit

    sqlstate = _extract_sqlstate(exc)
    if sqlstate is not None and sqlstate in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[sqlstate]

    for text in _failure_descriptions(exc):
        kind = classify_integrity_text(text)
        if kind is not ConstraintKind.OTHER:
            return kind
    return ConstraintKind.OTHER


def classify_integrity_text(text: str | None) -> ConstraintKind:
    if not text:
        return ConstraintKind.OTHER
    lowered = text.lower()
    if "unique" in lowered:
        return ConstraintKind.UNIQUE
    if "foreign key" in lowered:
        return ConstraintKind.FOREIGN_KEY
    return ConstraintKind.OTHER


def integrity_message(exc: BaseException) -> str:
    return INTEGRITY_MESSAGES[resolve_constraint_kind(exc)]


def _failure_descriptions(exc: BaseException) -> list[str]:
    # str(DBAPIError) embeds the SQL statement and parameters; only the
    # driver message describes the violated constraint.
    descriptions: list[str] = []
    for candidate in (exc, exc.__cause__):
        if candidate is None:
            continue
        if isinstance(candidate, DBAPIError):
            descriptions.append(str(candidate.orig))
        else:
            descriptions.append(str(candidate))
    return descriptions


def _extract_sqlstate(exc: BaseException) -> str | None:
    # Domain errors wrapping a storage failure carry it as __cause__.
    candidates: list[object] = [exc]
    if exc.__cause__ is not None:
        candidates.append(exc.__cause__)

    for candidate in candidates:
        driver_error = candidate.orig if isinstance(candidate, DBAPIError) else candidate
        # asyncpg exposes ``sqlstate``, psycopg2/psycopg expose ``pgcode``.
        for attribute in ("sqlstate", "pgcode"):
            value = getattr(driver_error, attribute, None)
            if isinstance(value, str) and value:
                return value
    return None


__all__ = [
    "ConstraintKind",
    "FOREIGN_KEY_VIOLATION_SQLSTATE",
    "INTEGRITY_MESSAGES",
    "UNIQUE_VIOLATION_SQLSTATE",
    "classify_integrity_text",
    "integrity_message",
    "resolve_constraint_kind",
]
