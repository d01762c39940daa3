"""Leave router — listing, approve/reject, orphan cleanup.

All endpoints require authentication. Each request builds a fresh
LeaveReconciler; the EMS backend is the only source of truth.
"""

from fastapi import APIRouter, Depends, Query

from admin_console.auth.dependencies import CurrentUser, get_current_user
from admin_console.common.constants import StatusFilter
from admin_console.data_service import DataServiceClient
from admin_console.dependencies import get_data_service
from admin_console.leave.schemas import (
    LeaveCleanupOut,
    LeaveListOut,
    LeaveStatusUpdateRequest,
)
from admin_console.leave.service import LeaveReconciler

router = APIRouter(prefix="", tags=["leave"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=LeaveListOut)
async def list_leaves(
    status: StatusFilter = Query(StatusFilter.all),
    search: str = Query("", max_length=200),
    client: DataServiceClient = Depends(get_data_service),
):
    """Valid leave requests matching the filter and search, plus any
    data-integrity warning for records that were hidden."""
    return await LeaveReconciler(client).list_leaves(status, search)


# ── PUT /{id}/status ────────────────────────────────────────────────

@router.put("/{leave_id}/status", response_model=LeaveListOut)
async def update_leave_status(
    leave_id: str,
    body: LeaveStatusUpdateRequest,
    status: StatusFilter = Query(StatusFilter.all),
    search: str = Query("", max_length=200),
    client: DataServiceClient = Depends(get_data_service),
):
    """Approve or reject a leave request and return the refreshed listing."""
    reconciler = LeaveReconciler(client)
    # Load the current view first so the legality pre-check has data
    await reconciler.list_leaves(status, search)
    return await reconciler.transition_status(leave_id, body.status)


# ── DELETE /cleanup ─────────────────────────────────────────────────

@router.delete("/cleanup", response_model=LeaveCleanupOut)
async def cleanup_orphaned_leaves(
    status: StatusFilter = Query(StatusFilter.all),
    search: str = Query("", max_length=200),
    user: CurrentUser = Depends(get_current_user),
    client: DataServiceClient = Depends(get_data_service),
):
    """Delete leave records whose employee no longer exists (admin only)."""
    reconciler = LeaveReconciler(client)
    reconciler.filter_status = status
    reconciler.search_text = search
    return await reconciler.cleanup_orphans(is_admin=user.is_admin)
