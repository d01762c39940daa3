"""Common module — shared utilities for the EMS admin console."""

from admin_console.common.constants import (
    NOT_AVAILABLE,
    FailureCause,
    IntegrityIssue,
    LeaveStatus,
    ReportKind,
    StatusFilter,
    TransitionTarget,
    UserRole,
)
from admin_console.common.exceptions import (
    AppException,
    DataServiceError,
    ForbiddenException,
    NoDataError,
    ReportGenerationError,
    ValidationException,
    register_exception_handlers,
)
from admin_console.common.filters import apply_search, matches_search
from admin_console.common.notices import NoticeSlot, TransientNotice, utc_now

__all__ = [
    # Constants / Enums
    "FailureCause",
    "IntegrityIssue",
    "LeaveStatus",
    "ReportKind",
    "StatusFilter",
    "TransitionTarget",
    "UserRole",
    "NOT_AVAILABLE",
    # Exceptions
    "AppException",
    "DataServiceError",
    "ForbiddenException",
    "NoDataError",
    "ReportGenerationError",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_search",
    "matches_search",
    # Notices
    "NoticeSlot",
    "TransientNotice",
    "utc_now",
]
