"""Enums and constants for the admin console — matching the EMS backend vocabulary."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    employee = "employee"
    admin = "admin"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class StatusFilter(str, enum.Enum):
    all = "all"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class TransitionTarget(str, enum.Enum):
    """Statuses a pending leave request can move to."""

    approved = "approved"
    rejected = "rejected"


class IntegrityIssue(str, enum.Enum):
    missing_employee = "missing_employee"
    missing_first_name = "missing_first_name"
    missing_type = "missing_type"
    missing_reason = "missing_reason"
    malformed = "malformed"


# ── Reports ─────────────────────────────────────────────────────────

class ReportKind(str, enum.Enum):
    attendance = "attendance"
    leave = "leave"
    department = "department"


class FailureCause(str, enum.Enum):
    auth_expired = "auth_expired"
    forbidden = "forbidden"
    endpoint_missing = "endpoint_missing"
    server_error = "server_error"
    unreachable = "unreachable"
    unknown = "unknown"


# ── Misc constants ──────────────────────────────────────────────────

NOT_AVAILABLE = "N/A"
CSV_MEDIA_TYPE = "text/csv"
