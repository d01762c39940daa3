#!/usr/bin/env python3
"""Report Export — generate one EMS report and save it as a CSV file.

Purpose: produce the same attendance / leave / department CSVs as the console's
Reports page without going through the UI.

Usage:
    python -m scripts.export_report attendance                      # current month
    python -m scripts.export_report leave --month 3 --year 2026
    python -m scripts.export_report department --out ./exports

Requires in .env (project root) or the environment:
    EMS_API_TOKEN      (bearer token accepted by the EMS backend)

Optionally:
    DATA_SERVICE_URL   (defaults to the hosted EMS backend)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import httpx

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# The CLI forwards a token, it never verifies one
os.environ.setdefault("JWT_SECRET", "unused-by-export-cli")

from admin_console.common.constants import ReportKind  # noqa: E402
from admin_console.common.exceptions import AppException  # noqa: E402
from admin_console.common.log import setup_logging  # noqa: E402
from admin_console.config import settings  # noqa: E402
from admin_console.data_service import DataServiceClient, build_http_client  # noqa: E402
from admin_console.reports.service import ReportExporter  # noqa: E402

logger = logging.getLogger("export_report")


async def export_report(
    kind: ReportKind,
    *,
    month: int,
    year: int,
    token: Optional[str],
    out_dir: Path,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Path:
    """Generate the report and write it under *out_dir*; return the file path."""
    async with build_http_client(settings, transport=transport) as http:
        artifact = await ReportExporter(DataServiceClient(http, token=token)).generate(
            kind, month=month, year=year,
        )

    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / artifact.filename
    path.write_bytes(artifact.content)
    logger.info("Saved %d rows to %s", artifact.row_count, path)
    return path


# ══════════════════════════════════════════════════════════════════════
# Main
# ══════════════════════════════════════════════════════════════════════

def main(argv: Optional[list[str]] = None) -> int:
    today = date.today()
    parser = argparse.ArgumentParser(
        description="Export an EMS report (attendance / leave / department) to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s attendance                         # current month
  %(prog)s leave --month 3 --year 2026        # specific month
  %(prog)s department --out ./exports         # snapshot, custom folder
        """,
    )
    parser.add_argument("kind", choices=[k.value for k in ReportKind],
                        help="Report kind")
    parser.add_argument("--month", type=int, default=today.month,
                        help="Month 1-12 (default: current; ignored for department)")
    parser.add_argument("--year", type=int, default=today.year,
                        help="Four-digit year (default: current; ignored for department)")
    parser.add_argument("--out", type=Path, default=Path.cwd(),
                        help="Output folder (default: current directory)")
    parser.add_argument("--token", type=str, default=os.getenv("EMS_API_TOKEN"),
                        help="EMS bearer token (default: $EMS_API_TOKEN)")
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL)

    if not args.token:
        logger.warning("No EMS_API_TOKEN set — the backend will likely answer 401")

    try:
        path = asyncio.run(export_report(
            ReportKind(args.kind),
            month=args.month,
            year=args.year,
            token=args.token,
            out_dir=args.out,
        ))
    except AppException as exc:
        logger.error("❌ %s", exc.detail)
        return 1

    print(f"✅ Report written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
