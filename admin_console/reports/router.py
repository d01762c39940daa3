"""Reports router — CSV export of attendance, leave and department reports."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from admin_console.common.constants import ReportKind
from admin_console.common.rate_limit import limiter
from admin_console.config import settings
from admin_console.data_service import DataServiceClient
from admin_console.dependencies import get_data_service
from admin_console.reports.service import ReportExporter

router = APIRouter()


# ── GET /{kind} ─────────────────────────────────────────────────────

@router.get(
    "/{kind}",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
@limiter.limit(settings.REPORT_RATE_LIMIT)
async def generate_report(
    request: Request,
    kind: ReportKind,
    month: Optional[int] = Query(None, description="1-12; defaults to the current month"),
    year: Optional[int] = Query(None, description="Four digits; defaults to the current year"),
    client: DataServiceClient = Depends(get_data_service),
):
    """Generate a report and return it as a CSV attachment.

    ``month``/``year`` are checked only for monthly kinds and ignored for the
    department report.
    """
    today = date.today()
    artifact = await ReportExporter(client).generate(
        kind,
        month=today.month if month is None else month,
        year=today.year if year is None else year,
    )
    return Response(
        content=artifact.content,
        media_type=f"{artifact.media_type}; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
