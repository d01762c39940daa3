"""Report service layer — fetch aggregate records, project, serialize to CSV.

One entry point, ``ReportExporter.generate``, dispatches on the report kind
through ``REPORT_SCHEMAS``. An empty report is a ``NoDataError``; any
upstream failure becomes a ``ReportGenerationError`` whose message depends on
the failure cause. Nothing is retried here.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Iterable, Optional, Sequence, Union

from admin_console.common.constants import FailureCause, ReportKind
from admin_console.common.exceptions import (
    DataServiceError,
    NoDataError,
    ReportGenerationError,
    ValidationException,
)
from admin_console.data_service import DataServiceClient
from admin_console.reports.projections import REPORT_SCHEMAS, ReportSchema
from admin_console.reports.schemas import ReportArtifact

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate report"

_STATUS_CAUSES: dict[int, FailureCause] = {
    401: FailureCause.auth_expired,
    403: FailureCause.forbidden,
    404: FailureCause.endpoint_missing,
    500: FailureCause.server_error,
}

_CAUSE_MESSAGES: dict[FailureCause, str] = {
    FailureCause.auth_expired: "Authentication failed. Please login again.",
    FailureCause.forbidden: "Access denied. You don't have permission to generate reports.",
    FailureCause.endpoint_missing: "Report endpoint not found. Please check the server configuration.",
    FailureCause.server_error: "Server error. Please try again later.",
    FailureCause.unreachable: "Cannot connect to server. Please check if the backend is running.",
    FailureCause.unknown: "Failed to generate report. Please try again.",
}


# ── Failure taxonomy ────────────────────────────────────────────────

def classify_failure(exc: DataServiceError) -> FailureCause:
    if exc.status_code in _STATUS_CAUSES:
        return _STATUS_CAUSES[exc.status_code]
    if exc.unreachable:
        return FailureCause.unreachable
    return FailureCause.unknown


def describe_failure(exc: DataServiceError) -> tuple[FailureCause, str]:
    """(cause, user-facing message) for a failed report request."""
    cause = classify_failure(exc)
    if cause == FailureCause.unknown:
        return cause, exc.user_message(_CAUSE_MESSAGES[cause])
    return cause, _CAUSE_MESSAGES[cause]


# ── Serialization ───────────────────────────────────────────────────

def to_csv(rows: Iterable[Sequence[Any]]) -> str:
    """Quote every cell, separate with commas, end each row with ``\\n``."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def build_rows(schema: ReportSchema, raw_records: Iterable[Any]) -> list[list[str]]:
    """Header plus one projected row per raw record.

    ``null`` entries are read as records with every field absent.
    """
    rows: list[list[str]] = [list(schema.columns)]
    for raw in raw_records:
        record = schema.record_model.model_validate(raw if isinstance(raw, dict) else {})
        rows.append(schema.project(record))
    return rows


# ═════════════════════════════════════════════════════════════════════
# ReportExporter
# ═════════════════════════════════════════════════════════════════════


class ReportExporter:
    """Generates CSV report artifacts from EMS backend aggregates."""

    def __init__(self, client: DataServiceClient) -> None:
        self._client = client

    @staticmethod
    def _validate_window(month: Optional[int], year: Optional[int]) -> None:
        errors: dict[str, list[str]] = {}
        if month is None or not 1 <= month <= 12:
            errors["month"] = ["Month must be between 1 and 12."]
        if year is None or not 1000 <= year <= 9999:
            errors["year"] = ["Year must be a four-digit number."]
        if errors:
            raise ValidationException(errors)

    async def _fetch(
        self,
        kind: ReportKind,
        month: Optional[int],
        year: Optional[int],
    ) -> dict[str, Any]:
        if kind == ReportKind.attendance:
            return await self._client.get_attendance_report(month, year)
        if kind == ReportKind.leave:
            return await self._client.get_leave_report(month, year)
        return await self._client.get_department_report()

    async def generate(
        self,
        kind: Union[ReportKind, str],
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ReportArtifact:
        """Fetch, project and serialize one report.

        ``month``/``year`` are required for attendance and leave reports and
        ignored for the department snapshot.

        Raises:
            ValidationException: bad kind or time window.
            NoDataError: the service returned no records.
            ReportGenerationError: the service call failed.
        """
        try:
            kind = ReportKind(kind)
        except ValueError:
            raise ValidationException({"kind": [f"Invalid report type '{kind}'."]})

        schema = REPORT_SCHEMAS[kind]
        if schema.monthly:
            self._validate_window(month, year)
        else:
            month = year = None

        try:
            payload = await self._fetch(kind, month, year)
        except DataServiceError as exc:
            cause, message = describe_failure(exc)
            logger.error("Report generation error (%s, %s): %s", kind.value, cause.value, exc)
            raise ReportGenerationError(cause, message) from exc

        if not payload.get("success"):
            logger.error("%s report request was not successful", kind.value)
            raise ReportGenerationError(FailureCause.unknown, GENERATION_FAILED)

        records = payload.get("report")
        if not isinstance(records, list) or not records:
            raise NoDataError(kind, month, year)

        rows = build_rows(schema, records)
        artifact = ReportArtifact(
            kind=kind,
            filename=schema.filename(month, year),
            content=to_csv(rows).encode("utf-8"),
            row_count=len(rows) - 1,
        )
        logger.info("Generated %s (%d rows)", artifact.filename, artifact.row_count)
        return artifact
