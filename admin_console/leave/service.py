"""Leave service layer — reconciliation of fetched leaves, status transitions, cleanup.

Business logic:
  - Fetch leaves (optionally narrowed by status) and split them into valid
    and invalid records; invalid ones raise a data-integrity warning
  - Case-insensitive search across employee name, email, type and reason
  - Approve/reject with a local legality pre-check, then a fresh re-list
  - Admin-only bulk cleanup of orphaned records

Every operation returns the listing state. Service failures become an
``error`` message in that state and are never raised to the caller.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from admin_console.common.constants import (
    NOT_AVAILABLE,
    IntegrityIssue,
    LeaveStatus,
    StatusFilter,
    TransitionTarget,
)
from admin_console.common.exceptions import (
    DataServiceError,
    ForbiddenException,
    ValidationException,
)
from admin_console.common.filters import apply_search
from admin_console.common.notices import Clock, NoticeSlot, utc_now
from admin_console.config import settings
from admin_console.data_service import DataServiceClient
from admin_console.leave.schemas import (
    DataIssueSummary,
    InvalidLeave,
    LeaveCleanupOut,
    LeaveListOut,
    LeaveRecord,
    LeaveRecordOut,
    NoticeOut,
)

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load leave requests"
UPDATE_FAILED = "Failed to update leave status"
CLEANUP_FAILED = "Failed to clean up orphaned records"
STATUS_UPDATED = "Leave status updated successfully"


def _format_day(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def _as_count(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


# ═════════════════════════════════════════════════════════════════════
# LeaveReconciler
# ═════════════════════════════════════════════════════════════════════


class LeaveReconciler:
    """Leave listing state for one console session.

    Holds the last fetched collection, the active filter and search text, the
    integrity warning, the last error and a transient notice. Nothing is
    cached beyond the instance; every refresh replaces the collection.
    """

    def __init__(
        self,
        client: DataServiceClient,
        *,
        clock: Clock = utc_now,
        status_notice_seconds: Optional[float] = None,
        cleanup_notice_seconds: Optional[float] = None,
    ) -> None:
        self._client = client
        self._status_notice_seconds = (
            settings.STATUS_NOTICE_SECONDS
            if status_notice_seconds is None else status_notice_seconds
        )
        self._cleanup_notice_seconds = (
            settings.CLEANUP_NOTICE_SECONDS
            if cleanup_notice_seconds is None else cleanup_notice_seconds
        )

        self.filter_status: StatusFilter = StatusFilter.all
        self.search_text: str = ""
        self.valid: list[LeaveRecord] = []
        self.invalid: list[InvalidLeave] = []
        self.error: Optional[str] = None
        self.notice = NoticeSlot(clock)

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def classify(raw_leaves: Iterable[Any]) -> tuple[list[LeaveRecord], list[InvalidLeave]]:
        """Split raw service entries into (valid, invalid), preserving order."""
        valid: list[LeaveRecord] = []
        invalid: list[InvalidLeave] = []
        for raw in raw_leaves:
            try:
                record = LeaveRecord.model_validate(raw)
            except ValidationError:
                raw_id = raw.get("_id") if isinstance(raw, dict) else None
                invalid.append(InvalidLeave(
                    id=str(raw_id) if raw_id is not None else None,
                    issues=[IntegrityIssue.malformed],
                    raw=raw,
                ))
                continue

            issues = record.integrity_issues()
            if issues:
                invalid.append(InvalidLeave(id=record.id, issues=issues, record=record, raw=raw))
            else:
                valid.append(record)
        return valid, invalid

    @staticmethod
    def _build_record_response(record: LeaveRecord) -> LeaveRecordOut:
        """Flatten a valid LeaveRecord for display."""
        emp = record.employee
        leave_type = record.type or ""
        period = record.period
        return LeaveRecordOut(
            id=record.id,
            employee_name=" ".join(p for p in (emp.first_name, emp.last_name) if p),
            email=emp.email,
            department_name=emp.department_name,
            type=leave_type,
            type_label=leave_type[:1].upper() + leave_type[1:],
            start_date=record.start_date,
            end_date=record.end_date,
            period_label=(
                f"{_format_day(period[0])} - {_format_day(period[1])}"
                if period else NOT_AVAILABLE
            ),
            reason=record.reason or "",
            status=record.status,
            actions_available=record.status == LeaveStatus.pending,
        )

    def _data_issues(self) -> Optional[DataIssueSummary]:
        if not self.invalid:
            return None
        count = len(self.invalid)
        return DataIssueSummary(
            count=count,
            orphaned_count=sum(1 for leave in self.invalid if leave.is_orphaned),
            message=(
                f"Found {count} leave record(s) with missing employee data. "
                "These records will not be displayed. "
                "Contact an administrator to clean up the database."
            ),
            records=list(self.invalid),
        )

    def _find(self, leave_id: str) -> Optional[LeaveRecord]:
        return next((r for r in self.valid if r.id == leave_id), None)

    def display(self) -> list[LeaveRecord]:
        """Valid records matching the current search text, in service order."""
        return apply_search(self.valid, self.search_text, LeaveRecord.search_fields)

    def _state(self) -> dict[str, Any]:
        shown = self.display()
        notice = self.notice.current()
        return dict(
            leaves=[self._build_record_response(r) for r in shown],
            total=len(shown),
            filter_status=self.filter_status,
            search=self.search_text,
            data_issues=self._data_issues(),
            error=self.error,
            notice=(
                NoticeOut(message=notice.message, expires_at=notice.expires_at)
                if notice else None
            ),
        )

    def snapshot(self) -> LeaveListOut:
        return LeaveListOut(**self._state())

    # ─────────────────────────────────────────────────────────────────
    # List / Search
    # ─────────────────────────────────────────────────────────────────

    async def list_leaves(
        self,
        filter_status: Union[StatusFilter, str, None] = None,
        search: Optional[str] = None,
    ) -> LeaveListOut:
        """Fetch a fresh collection and return the listing state.

        ``None`` arguments keep the current filter / search text, which is
        how mutations re-list with the same view.
        """
        if filter_status is not None:
            self.filter_status = StatusFilter(filter_status)
        if search is not None:
            self.search_text = search
        self.error = None

        status = None if self.filter_status == StatusFilter.all else self.filter_status.value
        try:
            payload = await self._client.list_leaves(status=status)
        except DataServiceError as exc:
            logger.error("Loading leave requests failed: %s", exc)
            self.valid = []
            self.error = exc.user_message(LOAD_FAILED)
            return self.snapshot()

        raw_leaves = payload.get("leaves")
        if not payload.get("success") or not isinstance(raw_leaves, list):
            logger.error("Leave listing was not successful: %r", payload.get("message"))
            self.valid = []
            self.error = LOAD_FAILED
            return self.snapshot()

        self.valid, self.invalid = self.classify(raw_leaves)
        if self.invalid:
            logger.warning(
                "Found %d leave record(s) failing integrity checks: %s",
                len(self.invalid),
                [(leave.id, [i.value for i in leave.issues]) for leave in self.invalid],
            )
        logger.debug(
            "Loaded %d leave requests (%d valid, status=%s)",
            len(raw_leaves), len(self.valid), self.filter_status.value,
        )
        return self.snapshot()

    def search(self, search_text: str) -> LeaveListOut:
        """Re-filter the last fetched collection without a remote call."""
        self.search_text = search_text
        return self.snapshot()

    # ─────────────────────────────────────────────────────────────────
    # Status transition
    # ─────────────────────────────────────────────────────────────────

    async def transition_status(
        self,
        leave_id: str,
        new_status: Union[TransitionTarget, str],
    ) -> LeaveListOut:
        """Approve or reject a leave request, then re-list.

        Pre-check against the last fetched collection: asking for the status
        a record already has is a no-op, and a record that already left
        ``pending`` is refused locally. Unknown ids go to the service, which
        decides.
        """
        try:
            target = TransitionTarget(new_status)
        except ValueError:
            raise ValidationException(
                {"status": [f"'{new_status}' is not a valid target status."]}
            )

        current = self._find(leave_id)
        if current is not None and current.status != LeaveStatus.pending:
            message = f"Leave request is already {current.status.value}."
            if current.status.value == target.value:
                self.notice.post(message, self._status_notice_seconds)
            else:
                self.error = message
            return self.snapshot()

        try:
            payload = await self._client.update_leave_status(leave_id, target.value)
        except DataServiceError as exc:
            logger.error("Updating leave %s to %s failed: %s", leave_id, target.value, exc)
            self.error = exc.user_message(UPDATE_FAILED)
            return self.snapshot()

        if not payload.get("success"):
            self.error = UPDATE_FAILED
            return self.snapshot()

        logger.info("Leave %s marked %s", leave_id, target.value)
        self.notice.post(STATUS_UPDATED, self._status_notice_seconds)
        return await self.list_leaves()

    # ─────────────────────────────────────────────────────────────────
    # Orphan cleanup
    # ─────────────────────────────────────────────────────────────────

    async def cleanup_orphans(self, *, is_admin: bool) -> LeaveCleanupOut:
        """Delete leaves whose employee no longer resolves. Admins only."""
        if not is_admin:
            raise ForbiddenException(
                "Only administrators can clean up orphaned leave records."
            )

        try:
            payload = await self._client.cleanup_orphaned_leaves()
        except DataServiceError as exc:
            logger.error("Orphan cleanup failed: %s", exc)
            self.error = exc.user_message(CLEANUP_FAILED)
            return LeaveCleanupOut(**self._state())

        if not payload.get("success"):
            self.error = CLEANUP_FAILED
            return LeaveCleanupOut(**self._state())

        deleted = _as_count(payload.get("deletedCount"))
        logger.info("Cleaned up %d orphaned leave records", deleted)
        self.invalid = []
        self.notice.post(
            f"Cleaned up {deleted} orphaned leave records",
            self._cleanup_notice_seconds,
        )
        await self.list_leaves()
        return LeaveCleanupOut(deleted_count=deleted, **self._state())
