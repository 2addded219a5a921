"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: Registry mutations return ServiceResult and never raise for
caller-triggerable conditions. The CLI and any embedding host consume
this type.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """The four failure kinds a registry operation can report."""

    UNAUTHORIZED = "UNAUTHORIZED"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"

    @property
    def number(self) -> int:
        """Numeric error code as reported by the on-chain registry (``u1``..``u4``)."""
        return _ERROR_NUMBERS[self]


_ERROR_NUMBERS: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHORIZED: 1,
    ErrorCode.ALREADY_EXISTS: 2,
    ErrorCode.NOT_FOUND: 3,
    ErrorCode.INVALID_STATUS: 4,
}

_ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNAUTHORIZED: "Caller lacks the required role for this operation",
    ErrorCode.ALREADY_EXISTS: "An invoice with this ID already exists",
    ErrorCode.NOT_FOUND: "No invoice with this ID",
    ErrorCode.INVALID_STATUS: "Invoice is not in the required status",
}


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: ErrorCode
    message: str

    @classmethod
    def for_code(cls, code: ErrorCode) -> ServiceError:
        """Build the error for *code* with its fixed message."""
        return cls(code=code, message=_ERROR_MESSAGES[code])


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_invoice"``).
        data: Operation-specific payload on success. Registry mutations
            carry none.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: ErrorCode) -> ServiceResult:
        """Shorthand for a failed result carrying *code*."""
        return cls(ok=False, op=op, error=ServiceError.for_code(code))
