"""Return types shared by every service method.

Services never print and never raise for expected problems (a missing
chapter, an empty query). They return a :class:`ServiceResult`, which
``output.formatters`` turns into rich text, quiet lines, or JSON.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation failed: a stable ``code`` plus a human message."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation and selects the renderer. ``warnings`` are
    non-fatal (an unreadable file, a failing plugin hook) and are shown on
    stderr. ``meta`` carries the ``--verbose`` span tree.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    """A failed *op* result; keyword arguments become ``error.detail``."""
    error = ServiceError(code=code, message=message, detail=detail)
    return ServiceResult(ok=False, op=op, error=error)
