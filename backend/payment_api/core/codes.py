"""Stable error codes surfaced in every error envelope."""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    """Canonical machine-readable error codes of the public API."""

    # Payments
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    PAYMENT_PROCESSING_ERROR = "PAYMENT_PROCESSING_ERROR"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INVALID_PAYMENT_STATUS = "INVALID_PAYMENT_STATUS"

    # Resources
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"

    # Input
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    INVALID_JSON = "INVALID_JSON"
    TYPE_MISMATCH = "TYPE_MISMATCH"

    # Storage
    DATA_INTEGRITY_VIOLATION = "DATA_INTEGRITY_VIOLATION"

    # Authentication & authorization
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    BAD_CREDENTIALS = "BAD_CREDENTIALS"
    ACCESS_DENIED = "ACCESS_DENIED"

    # Internal
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # Transport/common (framework HTTP errors raised outside the domain)
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


__all__ = ["ErrorCode"]
