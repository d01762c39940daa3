"""Leave Pydantic v2 schemas — wire records and console responses.

Naming conventions:
  - LeaveRecord         → a leave as sent by the EMS backend
  - *Request            → request bodies (write)
  - *Out                → response bodies (read)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from admin_console.common.constants import (
    IntegrityIssue,
    LeaveStatus,
    StatusFilter,
    TransitionTarget,
)
from admin_console.common.schemas import EmployeeRef, lenient_text, object_or_none


def _parse_day(value: Any) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or an ISO timestamp; unreadable values become None."""
    if value is None or isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        if "T" in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


# ═════════════════════════════════════════════════════════════════════
# Wire record
# ═════════════════════════════════════════════════════════════════════


class LeaveRecord(BaseModel):
    """A leave request as returned by ``GET /employee/leaves/all``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    employee: Optional[EmployeeRef] = None
    type: Optional[str] = None
    start_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("startDate", "start_date"),
    )
    end_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("endDate", "end_date"),
    )
    reason: Optional[str] = None
    status: LeaveStatus = LeaveStatus.pending

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("employee", mode="before")
    @classmethod
    def _employee_object(cls, v: Any) -> Optional[dict]:
        return object_or_none(v)

    _text = field_validator("type", "reason", mode="before")(lenient_text)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates(cls, v: Any) -> Optional[date]:
        return _parse_day(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status_default(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return LeaveStatus.pending
        return v.strip().lower() if isinstance(v, str) else v

    # ── Integrity ─────────────────────────────────────────────────────

    def integrity_issues(self) -> list[IntegrityIssue]:
        issues: list[IntegrityIssue] = []
        if self.employee is None:
            issues.append(IntegrityIssue.missing_employee)
        elif not self.employee.first_name:
            issues.append(IntegrityIssue.missing_first_name)
        if not self.type:
            issues.append(IntegrityIssue.missing_type)
        if not self.reason:
            issues.append(IntegrityIssue.missing_reason)
        return issues

    @property
    def period(self) -> Optional[tuple[date, date]]:
        """(start, end) when both ends are known."""
        if self.start_date is None or self.end_date is None:
            return None
        return self.start_date, self.end_date

    def search_fields(self) -> tuple[Optional[str], ...]:
        emp = self.employee
        return (
            emp.first_name if emp else None,
            emp.last_name if emp else None,
            emp.email if emp else None,
            self.type,
            self.reason,
        )


class InvalidLeave(BaseModel):
    """A fetched leave that failed the integrity check."""

    id: Optional[str] = None
    issues: list[IntegrityIssue]
    record: Optional[LeaveRecord] = Field(None, exclude=True)
    raw: Any = Field(None, exclude=True)

    @property
    def is_orphaned(self) -> bool:
        return IntegrityIssue.missing_employee in self.issues


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class LeaveStatusUpdateRequest(BaseModel):
    """Payload for approving or rejecting a leave request."""

    status: TransitionTarget


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class LeaveRecordOut(BaseModel):
    """A valid leave request, flattened for display."""

    id: str
    employee_name: str
    email: Optional[str] = None
    department_name: Optional[str] = None
    type: str
    type_label: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    period_label: str
    reason: str
    status: LeaveStatus
    actions_available: bool = Field(
        ..., description="Approve/reject controls are offered only while pending",
    )


class DataIssueSummary(BaseModel):
    """Data-integrity warning for records hidden from the listing."""

    count: int
    orphaned_count: int
    message: str
    records: list[InvalidLeave] = Field(default_factory=list)


class NoticeOut(BaseModel):
    message: str
    expires_at: datetime


class LeaveListOut(BaseModel):
    """Listing state returned by every leave operation."""

    leaves: list[LeaveRecordOut] = Field(default_factory=list)
    total: int = 0
    filter_status: StatusFilter = StatusFilter.all
    search: str = ""
    data_issues: Optional[DataIssueSummary] = None
    error: Optional[str] = None
    notice: Optional[NoticeOut] = None


class LeaveCleanupOut(LeaveListOut):
    """Listing state after an orphan cleanup, with the removed count."""

    deleted_count: int = 0
