"""Centralized error translation and FastAPI exception handlers.

``ERROR_RULES`` is the single table mapping failure classes to a code, an
HTTP status and client wording. ``ErrorTranslator`` applies it and is the
only component that builds error envelopes; domain code raises typed
failures and never renders responses itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from http import HTTPStatus
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Final, Mapping, Sequence, cast
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from payment_api.core.codes import ErrorCode
from payment_api.core.integrity import integrity_message
from payment_api.core.logging import (
    REQUEST_ID_HEADER,
    bind_request_id,
    get_request_id,
    reset_request_id,
)
from payment_api.core.metrics import record_error_response
from payment_api.exceptions import (
    AccessDeniedError,
    AccountNotFoundError,
    AuthenticationError,
    BadCredentialsError,
    ConstraintViolationError,
    DataIntegrityViolationError,
    DuplicateResourceError,
    InsufficientFundsError,
    InvalidPaymentStatusError,
    PaymentNotFoundError,
    PaymentProcessingError,
    PaymentSystemError,
    UserNotFoundError,
    ValidationFailedError,
)
from payment_api.schemas.error import ErrorEnvelope, ErrorResponse

ExceptionHandlerCallable = Callable[[Request, Exception], Awaitable[Response]]


@dataclass(frozen=True, slots=True)
class ErrorRule:
    """How one failure class is rendered and logged.

    ``client_message`` of ``None`` means the failure's own message is safe to
    show and is used as-is.
    """

    code: ErrorCode | str
    status_code: int
    summary: str
    client_message: str | None = None
    log_level: int = logging.WARNING
    include_trace: bool = False


ERROR_RULES: Final[Mapping[type[BaseException], ErrorRule]] = MappingProxyType(
    {
        PaymentNotFoundError: ErrorRule(
            ErrorCode.PAYMENT_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            "Payment not found",
        ),
        PaymentProcessingError: ErrorRule(
            ErrorCode.PAYMENT_PROCESSING_ERROR,
            status.HTTP_400_BAD_REQUEST,
            "Payment processing failed",
            log_level=logging.ERROR,
            include_trace=True,
        ),
        InsufficientFundsError: ErrorRule(
            ErrorCode.INSUFFICIENT_FUNDS,
            status.HTTP_400_BAD_REQUEST,
            "Insufficient funds",
        ),
        InvalidPaymentStatusError: ErrorRule(
            ErrorCode.INVALID_PAYMENT_STATUS,
            status.HTTP_400_BAD_REQUEST,
            "Invalid payment status",
        ),
        AccountNotFoundError: ErrorRule(
            ErrorCode.ACCOUNT_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            "Account not found",
        ),
        UserNotFoundError: ErrorRule(
            ErrorCode.USER_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            "User not found",
        ),
        DuplicateResourceError: ErrorRule(
            ErrorCode.DUPLICATE_RESOURCE,
            status.HTTP_409_CONFLICT,
            "Resource already exists",
        ),
        ValidationFailedError: ErrorRule(
            ErrorCode.VALIDATION_ERROR,
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
        ),
        ConstraintViolationError: ErrorRule(
            ErrorCode.CONSTRAINT_VIOLATION,
            status.HTTP_400_BAD_REQUEST,
            "Constraint violation",
        ),
        DataIntegrityViolationError: ErrorRule(
            ErrorCode.DATA_INTEGRITY_VIOLATION,
            status.HTTP_409_CONFLICT,
            "Data integrity violation",
            log_level=logging.ERROR,
            include_trace=True,
        ),
        AuthenticationError: ErrorRule(
            ErrorCode.AUTHENTICATION_ERROR,
            status.HTTP_401_UNAUTHORIZED,
            "Authentication required",
            client_message="Authentication failed",
        ),
        BadCredentialsError: ErrorRule(
            ErrorCode.BAD_CREDENTIALS,
            status.HTTP_401_UNAUTHORIZED,
            "Invalid credentials",
            client_message="Invalid username or password",
        ),
        AccessDeniedError: ErrorRule(
            ErrorCode.ACCESS_DENIED,
            status.HTTP_403_FORBIDDEN,
            "Access denied",
            client_message="Access denied",
        ),
    }
)

INVALID_JSON_RULE: Final[ErrorRule] = ErrorRule(
    ErrorCode.INVALID_JSON,
    status.HTTP_400_BAD_REQUEST,
    "Invalid request format",
    client_message="Invalid JSON format",
)
TYPE_MISMATCH_RULE: Final[ErrorRule] = ErrorRule(
    ErrorCode.TYPE_MISMATCH,
    status.HTTP_400_BAD_REQUEST,
    "Invalid parameter type",
)
UNCLASSIFIED_RULE: Final[ErrorRule] = ErrorRule(
    ErrorCode.INTERNAL_SERVER_ERROR,
    status.HTTP_500_INTERNAL_SERVER_ERROR,
    "Internal server error",
    client_message="An unexpected error occurred",
    log_level=logging.ERROR,
    include_trace=True,
)

REQUEST_VALIDATION_MESSAGE: Final[str] = "Invalid request parameters"
PARAMETER_CONSTRAINT_MESSAGE: Final[str] = "Data constraint violation"

_PARAMETER_LOCATIONS: Final[frozenset[str]] = frozenset({"path", "query", "header", "cookie"})
_TRANSPORT_PREFIXES: Final[frozenset[str]] = frozenset(
    {"body", "query", "path", "header", "cookie"}
)


@dataclass(frozen=True, slots=True)
class TranslatedError:
    """Status, body and headers rendered for one failed request."""

    status_code: int
    response: ErrorResponse
    headers: Mapping[str, str] | None = None

    @property
    def envelope(self) -> ErrorEnvelope:
        return self.response.error

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            content=self.response.to_payload(),
            status_code=self.status_code,
            headers=dict(self.headers) if self.headers else None,
        )


@dataclass(frozen=True, slots=True)
class _Resolution:
    rule: ErrorRule
    message: str
    details: Mapping[str, str] | None = None
    headers: Mapping[str, str] | None = None


def _new_error_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorTranslator:
    """Turn any failure raised while handling a request into one error envelope.

    The translator keeps no mutable state; the logger it writes to is the
    only shared collaborator and is injected so tests can capture it.
    ``translate`` never raises: if classification or rendering fails, the
    failure is rendered as an unclassified internal error.

    ``rules`` may be a partial table. Request-validation and integrity
    failures fall back to the ``ERROR_RULES`` entries when it lacks them,
    and any other unmatched class is unclassified.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        rules: Mapping[type[BaseException], ErrorRule] = ERROR_RULES,
        id_factory: Callable[[], str] = _new_error_id,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._logger = logger or logging.getLogger("payment_api.errors")
        self._rules = rules
        self._id_factory = id_factory
        self._clock = clock

    def translate(self, exc: BaseException, path: str) -> TranslatedError:
        try:
            resolution = self._resolve(exc)
            translated = self._render(resolution, path)
        except Exception as failure:  # noqa: BLE001
            return self._translate_fallback(exc, path, failure)

        self._log(resolution, translated, exc)
        return translated

    def rule_for(self, exc_type: type[BaseException]) -> ErrorRule | None:
        """Return the rule of the most specific registered class in the MRO."""
        for klass in exc_type.__mro__:
            rule = self._rules.get(klass)
            if rule is not None:
                return rule
        return None

    def _resolve(self, exc: BaseException) -> _Resolution:
        if isinstance(exc, RequestValidationError):
            return self._resolve_request_validation(exc)
        if isinstance(exc, StarletteHTTPException):
            return self._resolve_http_exception(exc)
        if isinstance(exc, (IntegrityError, DataIntegrityViolationError)):
            rule = self._rule_or_default(DataIntegrityViolationError)
            return _Resolution(rule, integrity_message(exc))

        rule = self.rule_for(type(exc))
        if rule is None:
            return _Resolution(UNCLASSIFIED_RULE, cast(str, UNCLASSIFIED_RULE.client_message))

        if isinstance(exc, PaymentSystemError):
            return _Resolution(rule, rule.client_message or exc.message, details=exc.details)
        # A non-domain class registered in an injected table; its text is shown
        # only when the rule supplies no fixed wording.
        return _Resolution(rule, rule.client_message or str(exc) or rule.summary)

    def _rule_or_default(self, exc_type: type[BaseException]) -> ErrorRule:
        return self.rule_for(exc_type) or ERROR_RULES[exc_type]

    def _resolve_request_validation(self, exc: RequestValidationError) -> _Resolution:
        errors: list[Mapping[str, Any]] = list(exc.errors())

        if any(error.get("type") == "json_invalid" for error in errors):
            return _Resolution(INVALID_JSON_RULE, cast(str, INVALID_JSON_RULE.client_message))

        details = _format_validation_errors(errors) or None
        if errors and all(_location_kind(error) in _PARAMETER_LOCATIONS for error in errors):
            mismatched = [error for error in errors if _is_type_mismatch(error)]
            if mismatched:
                parameter = _format_error_location(mismatched[0].get("loc") or ())
                return _Resolution(
                    TYPE_MISMATCH_RULE,
                    f"Invalid value for parameter '{parameter}'",
                    details=details,
                )
            return _Resolution(
                self._rule_or_default(ConstraintViolationError),
                PARAMETER_CONSTRAINT_MESSAGE,
                details=details,
            )

        return _Resolution(
            self._rule_or_default(ValidationFailedError),
            REQUEST_VALIDATION_MESSAGE,
            details=details,
        )

    def _resolve_http_exception(self, exc: StarletteHTTPException) -> _Resolution:
        status_code = exc.status_code
        phrase = _status_phrase(status_code)
        detail = exc.detail
        details: dict[str, str] | None = None

        if isinstance(detail, Mapping):
            code = _coerce_code(detail.get("code"), status_code)
            message = str(detail.get("message") or phrase)
            raw_details = detail.get("details")
            if isinstance(raw_details, Mapping):
                details = {str(key): str(value) for key, value in raw_details.items()}
        else:
            code = _default_code_for_status(status_code)
            message = str(detail or phrase)

        server_side = status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
        rule = ErrorRule(
            code,
            status_code,
            phrase,
            log_level=logging.ERROR if server_side else logging.WARNING,
            include_trace=server_side,
        )
        headers = dict(exc.headers) if exc.headers else None
        return _Resolution(rule, message, details=details, headers=headers)

    def _render(self, resolution: _Resolution, path: str) -> TranslatedError:
        envelope = ErrorEnvelope(
            error_id=self._id_factory(),
            code=str(resolution.rule.code),
            message=resolution.message,
            timestamp=self._clock(),
            path=path,
            details=dict(resolution.details) if resolution.details else None,
        )
        return TranslatedError(
            status_code=resolution.rule.status_code,
            response=ErrorResponse(message=resolution.rule.summary, error=envelope),
            headers=resolution.headers,
        )

    def _log(self, resolution: _Resolution, translated: TranslatedError, exc: BaseException) -> None:
        rule = resolution.rule
        envelope = translated.envelope
        internal_message = exc.message if isinstance(exc, PaymentSystemError) else resolution.message

        self._logger.log(
            rule.log_level,
            "%s - error_id=%s",
            rule.summary,
            envelope.error_id,
            exc_info=(type(exc), exc, exc.__traceback__) if rule.include_trace else None,
            extra={
                "event": "request_error",
                "error_id": envelope.error_id,
                "error_code": envelope.code,
                "status_code": translated.status_code,
                "http_path": envelope.path,
                "error_message": internal_message,
            },
        )

    def _translate_fallback(
        self,
        exc: BaseException,
        path: str,
        failure: Exception,
    ) -> TranslatedError:
        error_id = str(uuid4())
        envelope = ErrorEnvelope(
            error_id=error_id,
            code=ErrorCode.INTERNAL_SERVER_ERROR.value,
            message=cast(str, UNCLASSIFIED_RULE.client_message),
            timestamp=datetime.now(timezone.utc),
            path=str(path),
        )
        self._logger.error(
            "%s - error_id=%s",
            UNCLASSIFIED_RULE.summary,
            error_id,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={
                "event": "request_error",
                "error_id": error_id,
                "error_code": envelope.code,
                "status_code": UNCLASSIFIED_RULE.status_code,
                "http_path": envelope.path,
                "error_message": str(exc),
                "translation_failure": repr(failure),
            },
        )
        return TranslatedError(
            status_code=UNCLASSIFIED_RULE.status_code,
            response=ErrorResponse(message=UNCLASSIFIED_RULE.summary, error=envelope),
        )


def register_exception_handlers(app: FastAPI, translator: ErrorTranslator | None = None) -> None:
    """Attach the error translator to every failure path of the FastAPI app."""

    handler = cast(ExceptionHandlerCallable, build_exception_handler(translator or ErrorTranslator()))
    for exc_type in (
        PaymentSystemError,
        IntegrityError,
        RequestValidationError,
        StarletteHTTPException,
        Exception,
    ):
        app.add_exception_handler(exc_type, handler)


def build_exception_handler(
    translator: ErrorTranslator,
) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", None) or get_request_id()
        token = bind_request_id(request_id) if request_id else None
        try:
            translated = translator.translate(exc, request.url.path)
        finally:
            if token is not None:
                reset_request_id(token)

        record_error_response(translated.envelope.code, translated.status_code)
        response = translated.to_response()
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    return handle_exception


def _format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> dict[str, str]:
    formatted: dict[str, str] = {}
    for error in errors:
        field = _format_error_location(error.get("loc") or ())
        message = str(error.get("msg", "Invalid value"))
        if field in formatted:
            formatted[field] = f"{formatted[field]}; {message}"
        else:
            formatted[field] = message
    return formatted


def _format_error_location(location: Sequence[object]) -> str:
    filtered = [str(part) for part in location if part not in _TRANSPORT_PREFIXES]
    if not filtered:
        filtered = [str(part) for part in location]
    return ".".join(filtered) if filtered else "_schema"


def _location_kind(error: Mapping[str, Any]) -> str:
    location = error.get("loc") or ()
    return str(location[0]) if location else ""


def _is_type_mismatch(error: Mapping[str, Any]) -> bool:
    error_type = str(error.get("type", ""))
    return error_type.endswith(("_parsing", "_type")) or error_type == "enum"


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _default_code_for_status(status_code: int) -> ErrorCode:
    mapping: dict[int, ErrorCode] = {
        status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
        status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
        status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
        status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: ErrorCode.PAYLOAD_TOO_LARGE,
        status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMIT_EXCEEDED,
        status.HTTP_502_BAD_GATEWAY: ErrorCode.SERVICE_UNAVAILABLE,
        status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
    }
    if status_code in mapping:
        return mapping[status_code]
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return ErrorCode.INTERNAL_SERVER_ERROR
    return ErrorCode.BAD_REQUEST


def _coerce_code(code: object, status_code: int) -> ErrorCode | str:
    if code is None or not str(code).strip():
        return _default_code_for_status(status_code)
    return str(code)


__all__ = [
    "ERROR_RULES",
    "ErrorCode",
    "ErrorRule",
    "ErrorTranslator",
    "INVALID_JSON_RULE",
    "TYPE_MISMATCH_RULE",
    "TranslatedError",
    "UNCLASSIFIED_RULE",
    "build_exception_handler",
    "register_exception_handlers",
]
