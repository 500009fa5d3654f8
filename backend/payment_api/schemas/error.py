"""Schemas for the client-facing error envelope."""

from __future__ import annotations

from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class ErrorEnvelope(BaseModel):
    """Normalized description of one failed request.

    Built once per failure by the error translator and never persisted.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    error_id: str = Field(min_length=1, description="Correlation id for support requests.")
    code: str
    message: str
    timestamp: datetime
    path: str
    details: Mapping[str, str] | None = Field(
        default=None,
        description="Field name to message mapping, only for validation-class errors.",
    )

    @field_validator("details", mode="after")
    @classmethod
    def _freeze_details(cls, value: Mapping[str, str] | None) -> Mapping[str, str] | None:
        if value is None:
            return None
        return MappingProxyType(dict(value))

    @field_serializer("details")
    def _serialize_details(self, value: Mapping[str, str] | None) -> dict[str, str] | None:
        return dict(value) if value is not None else None


class ErrorResponse(BaseModel):
    """Response body returned for every failed request."""

    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    message: str
    error: ErrorEnvelope

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["ErrorEnvelope", "ErrorResponse"]
