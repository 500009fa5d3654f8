"""Public exports for Pydantic schemas."""

from __future__ import annotations

from .error import ErrorEnvelope, ErrorResponse

__all__ = ["ErrorEnvelope", "ErrorResponse"]
