"""Report Pydantic v2 schemas — aggregate records per report kind.

Every field is optional on the wire. Defaults are applied when a record is
projected into CSV cells, never here: counts stay ``None`` when absent so the
projection can tell "missing" from a real zero if it ever needs to.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from admin_console.common.constants import CSV_MEDIA_TYPE, ReportKind
from admin_console.common.schemas import EmployeeRef, lenient_text, object_or_none


Count = Union[int, float]


def lenient_count(value: Any) -> Optional[Count]:
    """Numbers and numeric strings pass; anything else reads as absent.

    Integers stay ``int`` so large counts keep every digit.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


# ═════════════════════════════════════════════════════════════════════
# Wire records
# ═════════════════════════════════════════════════════════════════════


class _EmployeeReportRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    employee: Optional[EmployeeRef] = None
    total: Optional[Count] = None

    @field_validator("employee", mode="before")
    @classmethod
    def _employee_object(cls, v: Any) -> Optional[dict]:
        return object_or_none(v)


class AttendanceReportRecord(_EmployeeReportRecord):
    """One employee's attendance counts for the month."""

    present: Optional[Count] = None
    absent: Optional[Count] = None
    late: Optional[Count] = None

    _counts = field_validator("present", "absent", "late", "total", mode="before")(
        lenient_count
    )


class LeaveReportRecord(_EmployeeReportRecord):
    """One employee's leave request counts for the month."""

    approved: Optional[Count] = None
    pending: Optional[Count] = None
    rejected: Optional[Count] = None

    _counts = field_validator("approved", "pending", "rejected", "total", mode="before")(
        lenient_count
    )


class DepartmentReportRecord(BaseModel):
    """Head count of one department, broken down by position title."""

    model_config = ConfigDict(extra="ignore")

    department: Optional[str] = None
    total: Optional[Count] = None
    positions: Optional[dict[str, Optional[Count]]] = None

    _total = field_validator("total", mode="before")(lenient_count)

    @field_validator("department", mode="before")
    @classmethod
    def _department_name(cls, v: Any) -> Optional[str]:
        if isinstance(v, dict):
            v = v.get("name")
        return lenient_text(v)

    @field_validator("positions", mode="before")
    @classmethod
    def _positions(cls, v: Any) -> Optional[dict[str, Optional[Count]]]:
        if not isinstance(v, dict):
            return None
        return {str(title): lenient_count(count) for title, count in v.items()}


# ═════════════════════════════════════════════════════════════════════
# Artifact
# ═════════════════════════════════════════════════════════════════════


class ReportArtifact(BaseModel):
    """A generated report, ready to hand to the user as a download."""

    kind: ReportKind
    filename: str
    content: bytes
    media_type: str = CSV_MEDIA_TYPE
    row_count: int = Field(..., description="Data rows, header excluded")
