"""Service return contract for palletcount.

Catalog, counting and export services never raise to their caller for
expected failures. They return a :class:`ServiceResult`; a failed result
carries a :class:`ServiceError` whose ``code`` is one of :class:`ErrorCode`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, model_validator


class ErrorCode(StrEnum):
    """Stable, machine-readable failure codes."""

    INVALID_FACTOR = "INVALID_FACTOR"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_DATE = "INVALID_DATE"
    MISSING_NAME = "MISSING_NAME"
    DUPLICATE_ITEM = "DUPLICATE_ITEM"
    DUPLICATE_CODE = "DUPLICATE_CODE"
    NOT_FOUND = "NOT_FOUND"
    SESSION_FINALIZED = "SESSION_FINALIZED"
    INVALID_FORMAT = "INVALID_FORMAT"
    EXPORT_FAILED = "EXPORT_FAILED"


class ServiceError(BaseModel):
    """Why an operation failed. ``detail`` holds the offending ids/values."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one catalog, counting or export operation.

    Attributes:
        ok: True when the operation took effect (or, for reads, found data).
        op: Operation name; the output layer picks a renderer by it.
        data: Payload on success, e.g. ``total_units`` or a list of ``items``.
        warnings: Accepted-but-suspicious input, such as free-text lines
            entered with pallets.
        error: Set exactly when ``ok`` is False.
        meta: Hints that are not part of the payload (search tuning, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _error_matches_ok(self) -> Self:
        if self.ok and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.ok and self.error is None:
            raise ValueError("a failed result needs an error")
        return self
