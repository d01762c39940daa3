"""Column projections — one closed set of report schemas keyed by kind.

Each ``ReportSchema`` carries its header, the wire model its records parse
into, the projection from a record to CSV cells, and the download filename.
Null-safety lives here: absent counts render as ``0`` and absent employee or
department references as ``N/A``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Callable, Optional, Type

from pydantic import BaseModel

from admin_console.common.constants import NOT_AVAILABLE, ReportKind
from admin_console.common.schemas import EmployeeRef
from admin_console.reports.schemas import (
    AttendanceReportRecord,
    Count,
    DepartmentReportRecord,
    LeaveReportRecord,
)


# ── Cell helpers ────────────────────────────────────────────────────

def format_count(value: Optional[Count]) -> str:
    """Plain decimal text, never an exponent; absent reads as ``0``."""
    if value is None:
        return "0"
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)).normalize(), "f")


def attendance_rate(present: Optional[Count], total: Optional[Count]) -> str:
    """present / total × 100 to two decimals with a ``%`` suffix."""
    if not total or total <= 0:
        return "0.00%"
    with localcontext() as ctx:
        ctx.prec = 50
        rate = Decimal(str(present or 0)) / Decimal(str(total)) * 100
        # Room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, rate.adjusted() + 3)
        return f"{rate.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}%"


def employee_cells(employee: Optional[EmployeeRef]) -> list[str]:
    """[name, email, department] for an embedded employee."""
    if employee is None:
        return [NOT_AVAILABLE, NOT_AVAILABLE, NOT_AVAILABLE]
    return [
        f"{employee.first_name or NOT_AVAILABLE} {employee.last_name or NOT_AVAILABLE}",
        employee.email or NOT_AVAILABLE,
        employee.department_name or NOT_AVAILABLE,
    ]


def positions_cell(positions: Optional[dict[str, Optional[Count]]]) -> str:
    if not positions:
        return NOT_AVAILABLE
    return ", ".join(f"{title}: {format_count(count)}" for title, count in positions.items())


# ── Projections ─────────────────────────────────────────────────────

def _project_attendance(record: AttendanceReportRecord) -> list[str]:
    return employee_cells(record.employee) + [
        format_count(record.present),
        format_count(record.absent),
        format_count(record.late),
        format_count(record.total),
        attendance_rate(record.present, record.total),
    ]


def _project_leave(record: LeaveReportRecord) -> list[str]:
    return employee_cells(record.employee) + [
        format_count(record.approved),
        format_count(record.pending),
        format_count(record.rejected),
        format_count(record.total),
    ]


def _project_department(record: DepartmentReportRecord) -> list[str]:
    return [
        record.department or NOT_AVAILABLE,
        format_count(record.total),
        positions_cell(record.positions),
    ]


# ── Schemas ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ReportSchema:
    kind: ReportKind
    columns: tuple[str, ...]
    record_model: Type[BaseModel]
    project: Callable[..., list[str]]
    monthly: bool = True

    def filename(self, month: Optional[int] = None, year: Optional[int] = None) -> str:
        if not self.monthly:
            return f"{self.kind.value}_report.csv"
        return f"{self.kind.value}_report_{year}_{month}.csv"


REPORT_SCHEMAS: dict[ReportKind, ReportSchema] = {
    ReportKind.attendance: ReportSchema(
        kind=ReportKind.attendance,
        columns=(
            "Employee Name",
            "Email",
            "Department",
            "Present Days",
            "Absent Days",
            "Late Days",
            "Total Days",
            "Attendance Rate",
        ),
        record_model=AttendanceReportRecord,
        project=_project_attendance,
    ),
    ReportKind.leave: ReportSchema(
        kind=ReportKind.leave,
        columns=(
            "Employee Name",
            "Email",
            "Department",
            "Approved Leaves",
            "Pending Leaves",
            "Rejected Leaves",
            "Total Leaves",
        ),
        record_model=LeaveReportRecord,
        project=_project_leave,
    ),
    ReportKind.department: ReportSchema(
        kind=ReportKind.department,
        columns=("Department", "Total Employees", "Positions"),
        record_model=DepartmentReportRecord,
        project=_project_department,
        monthly=False,
    ),
}
