"""EMS backend client — stateless request/response boundary.

Every core operation talks to the remote data service through
``DataServiceClient``. Transport mechanics live here: base URL, bearer-token
injection, JSON headers, timeout and request/response logging. No retries;
any failure surfaces as ``DataServiceError``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from admin_console.common.exceptions import DataServiceError
from admin_console.config import Settings, settings

logger = logging.getLogger(__name__)


# ── Logging hooks ───────────────────────────────────────────────────

async def _log_request(request: httpx.Request) -> None:
    logger.info("API Request: %s %s", request.method, request.url)


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    if response.is_error:
        await response.aread()
        logger.error(
            "API Error: %d %s %s",
            response.status_code, request.url.path, response.text[:500],
        )
    else:
        logger.info("API Response: %d %s", response.status_code, request.url.path)


def build_http_client(
    config: Settings = settings,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the shared async HTTP client for the EMS backend."""
    return httpx.AsyncClient(
        base_url=config.DATA_SERVICE_URL,
        timeout=config.DATA_SERVICE_TIMEOUT_SECONDS,
        headers={"Content-Type": "application/json", "Accept": "application/json"},
        event_hooks={"request": [_log_request], "response": [_log_response]},
        transport=transport,
    )


def _payload_message(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"] or None
    return None


# ══════════════════════════════════════════════════════════════════════
# DataServiceClient
# ══════════════════════════════════════════════════════════════════════


class DataServiceClient:
    """EMS backend operations, authenticated with the caller's token."""

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None) -> None:
        self._http = http
        self._token = token

    # ── HTTP ──────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._http.request(
                method, path, params=params or None, json=json, headers=headers,
            )
        except httpx.ConnectError as exc:
            raise DataServiceError(
                f"Cannot connect to data service: {exc}", unreachable=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise DataServiceError(f"Data service request failed: {exc}") from exc

        if response.is_error:
            raise DataServiceError(
                f"Data service replied {response.status_code} for {method} {path}",
                status_code=response.status_code,
                message=_payload_message(response),
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise DataServiceError(
                f"Data service sent a non-JSON body for {method} {path}",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise DataServiceError(
                f"Data service sent an unexpected body for {method} {path}",
                status_code=response.status_code,
            )
        return data

    # ── Leaves ────────────────────────────────────────────────────────

    async def list_leaves(self, status: Optional[str] = None) -> dict[str, Any]:
        """GET /employee/leaves/all — ``status`` is omitted when ``None``."""
        return await self._request(
            "GET", "/employee/leaves/all", params={"status": status},
        )

    async def update_leave_status(self, leave_id: str, status: str) -> dict[str, Any]:
        return await self._request(
            "PUT", f"/employee/leaves/{leave_id}/status", json={"status": status},
        )

    async def cleanup_orphaned_leaves(self) -> dict[str, Any]:
        return await self._request("DELETE", "/employee/leaves/cleanup")

    # ── Reports ───────────────────────────────────────────────────────

    async def get_attendance_report(self, month: int, year: int) -> dict[str, Any]:
        return await self._request(
            "GET", "/employee/reports/attendance",
            params={"month": month, "year": year},
        )

    async def get_leave_report(self, month: int, year: int) -> dict[str, Any]:
        return await self._request(
            "GET", "/employee/reports/leave",
            params={"month": month, "year": year},
        )

    async def get_department_report(self) -> dict[str, Any]:
        return await self._request("GET", "/employee/reports/department")
