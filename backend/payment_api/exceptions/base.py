"""Base class for every domain failure raised by the payment services."""

from __future__ import annotations

from typing import ClassVar, Mapping

from payment_api.core.codes import ErrorCode


class PaymentSystemError(Exception):
    """Typed domain failure carrying a stable, machine-readable code.

    Subclasses pin ``code`` at class level so it cannot drift per instance.
    ``cause`` is kept for diagnostics only and is never rendered to clients.
    """

    code: ClassVar[ErrorCode]
    default_message: ClassVar[str | None] = None

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        resolved = message or self.default_message
        if not resolved:
            raise ValueError(f"{type(self).__name__} requires a message.")
        super().__init__(resolved)
        self.message = resolved
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def details(self) -> Mapping[str, str] | None:
        """Field-level detail; only validation-class failures provide it."""
        return None

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        code = getattr(self, "code", None)
        return f"{type(self).__name__}(code={code!r}, message={self.message!r})"
