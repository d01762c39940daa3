"""Custom exceptions and RFC 7807 Problem Detail error handlers."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from admin_console.common.constants import FailureCause, ReportKind

BASE_ERROR_URI = "https://ems-console.local/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)


class ForbiddenException(AppException):
    """403 — insufficient permissions."""

    def __init__(
        self,
        detail: str = "You do not have permission to perform this action.",
    ) -> None:
        super().__init__(
            status_code=403,
            error_type="forbidden",
            title="Forbidden",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


class NoDataError(AppException):
    """404 — the service returned an empty report; nothing to export."""

    def __init__(
        self,
        kind: ReportKind,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.month = month
        self.year = year
        if kind == ReportKind.department:
            detail = "No data available for department report"
        else:
            detail = f"No data available for {kind.value} report in {month}/{year}"
        super().__init__(
            status_code=404,
            error_type="no-data",
            title="No Report Data",
            detail=detail,
        )


# Console-side status for each upstream failure cause
_CAUSE_STATUS: dict[FailureCause, int] = {
    FailureCause.auth_expired: 401,
    FailureCause.forbidden: 403,
    FailureCause.endpoint_missing: 502,
    FailureCause.server_error: 502,
    FailureCause.unreachable: 503,
    FailureCause.unknown: 502,
}


class ReportGenerationError(AppException):
    """Report generation failed upstream; detail is the user-facing message."""

    def __init__(self, cause: FailureCause, detail: str) -> None:
        self.cause = cause
        super().__init__(
            status_code=_CAUSE_STATUS[cause],
            error_type=f"report-{cause.value.replace('_', '-')}",
            title="Report Generation Failed",
            detail=detail,
        )


# ── Transport ───────────────────────────────────────────────────────

class DataServiceError(Exception):
    """A call to the EMS backend failed.

    ``status_code`` is the upstream HTTP status when a response arrived,
    ``message`` the ``message`` field of its JSON payload when present, and
    ``unreachable`` is set when the connection itself was refused.
    """

    def __init__(
        self,
        detail: str,
        *,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
        unreachable: bool = False,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.unreachable = unreachable
        super().__init__(detail)

    def user_message(self, fallback: str) -> str:
        """Service-provided message when there is one, else *fallback*."""
        return self.message or fallback


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(exc: AppException, request: Request) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
        "instance": str(request.url.path),
    }
    if exc.errors:
        body["errors"] = exc.errors
    return body


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_problem_detail(exc, request),
        media_type="application/problem+json",
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "type": f"{BASE_ERROR_URI}/validation-error",
            "title": "Validation Error",
            "status": 422,
            "detail": "Request validation failed.",
            "instance": str(request.url.path),
            "errors": field_errors,
        },
        media_type="application/problem+json",
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
