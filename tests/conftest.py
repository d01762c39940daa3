"""Shared test fixtures — fake EMS backend, HTTP clients, auth helpers, factories.

Reusable across all test modules (leave, reports, api, common).
The EMS backend is an in-memory ``FakeDataService`` served through
``httpx.MockTransport``, so no test touches the network.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator, Optional, Union

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

from admin_console.common.constants import UserRole
from admin_console.config import settings
from admin_console.data_service import DataServiceClient, build_http_client
from admin_console.dependencies import get_http_client
from admin_console.main import create_app


# ── Fake EMS backend ────────────────────────────────────────────────

class FakeDataService:
    """In-memory stand-in for the EMS backend's leave and report endpoints."""

    def __init__(self) -> None:
        self.leaves: list[Any] = []
        self.reports: dict[str, Any] = {"attendance": [], "leave": [], "department": []}
        self.requests: list[httpx.Request] = []
        self._failures: dict[tuple[str, str], Union[httpx.Response, Exception]] = {}

    # ── Scripting helpers ─────────────────────────────────────────────

    def fail(
        self,
        method: str,
        path: str,
        *,
        status: int = 500,
        message: Optional[str] = None,
        body: Any = None,
    ) -> None:
        """Make *method path* answer with an HTTP error."""
        if body is None:
            body = {"success": False}
            if message is not None:
                body["message"] = message
        self._failures[(method, path)] = httpx.Response(status, json=body)

    def refuse(self, method: str, path: str) -> None:
        """Make *method path* fail as if the backend were down."""
        self._failures[(method, path)] = httpx.ConnectError("Connection refused")

    def recover(self) -> None:
        """Drop every scripted failure."""
        self._failures.clear()

    def calls(self, method: str, path: Optional[str] = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]

    # ── Transport handler ─────────────────────────────────────────────

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        failure = self._failures.get((request.method, request.url.path))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure

        path = request.url.path
        if request.method == "GET" and path == "/employee/leaves/all":
            return self._list_leaves(request)
        if request.method == "DELETE" and path == "/employee/leaves/cleanup":
            return self._cleanup()
        if request.method == "PUT" and path.startswith("/employee/leaves/") and path.endswith("/status"):
            leave_id = path[len("/employee/leaves/"):-len("/status")]
            return self._update_status(leave_id, json.loads(request.content))
        if request.method == "GET" and path.startswith("/employee/reports/"):
            kind = path.rsplit("/", 1)[-1]
            if kind in self.reports:
                return httpx.Response(200, json={"success": True, "report": self.reports[kind]})
        return httpx.Response(404, json={"success": False, "message": "Route not found"})

    def _list_leaves(self, request: httpx.Request) -> httpx.Response:
        status = request.url.params.get("status")
        leaves = self.leaves
        if status:
            leaves = [
                leave for leave in leaves
                if isinstance(leave, dict) and (leave.get("status") or "pending") == status
            ]
        return httpx.Response(200, json={"success": True, "leaves": leaves})

    def _update_status(self, leave_id: str, body: dict) -> httpx.Response:
        for leave in self.leaves:
            if isinstance(leave, dict) and leave.get("_id") == leave_id:
                leave["status"] = body["status"]
                return httpx.Response(200, json={"success": True, "leave": leave})
        return httpx.Response(404, json={"success": False, "message": "Leave not found"})

    def _cleanup(self) -> httpx.Response:
        kept = [
            leave for leave in self.leaves
            if isinstance(leave, dict) and isinstance(leave.get("employee"), dict)
        ]
        deleted = len(self.leaves) - len(kept)
        self.leaves = kept
        return httpx.Response(200, json={"success": True, "deletedCount": deleted})


class FakeClock:
    """Deterministic clock for transient notices."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from admin_console.common.rate_limit import limiter
    try:
        # Clear the in-memory storage used by slowapi/limits
        if hasattr(limiter, "_storage"):
            limiter._storage.reset()
    except Exception:
        pass
    yield


@pytest.fixture
def fake_service() -> FakeDataService:
    return FakeDataService()


@pytest.fixture
async def http_client(fake_service) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Shared EMS backend client wired to the fake service."""
    async with build_http_client(
        settings, transport=httpx.MockTransport(fake_service.handler),
    ) as http:
        yield http


@pytest.fixture
def data_client(http_client) -> DataServiceClient:
    return DataServiceClient(http_client, token="ems-test-token")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app(http_client):
    """Create a fresh app instance with the EMS backend client overridden."""
    application = create_app()
    application.dependency_overrides[get_http_client] = lambda: http_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Record factories ────────────────────────────────────────────────

def _object_id() -> str:
    return uuid.uuid4().hex[:24]


def _make_employee(
    *,
    first_name: Optional[str] = "John",
    last_name: Optional[str] = "Doe",
    email: Optional[str] = "john.doe@example.com",
    department: Optional[str] = "Engineering",
) -> dict:
    return dict(
        _id=_object_id(),
        firstName=first_name,
        lastName=last_name,
        email=email,
        department={"_id": _object_id(), "name": department} if department else None,
    )


def _make_leave(
    *,
    employee: Any = "default",
    type: Optional[str] = "sick",
    reason: Optional[str] = "Flu and fever",
    status: Optional[str] = "pending",
    start_date: Optional[str] = "2026-03-04T00:00:00.000Z",
    end_date: Optional[str] = "2026-03-06T00:00:00.000Z",
) -> dict:
    return dict(
        _id=_object_id(),
        employee=_make_employee() if employee == "default" else employee,
        type=type,
        reason=reason,
        status=status,
        startDate=start_date,
        endDate=end_date,
        createdAt=datetime(2026, 3, 1, tzinfo=timezone.utc).isoformat(),
    )


def _make_attendance_row(
    *,
    employee: Any = "default",
    present: Any = 18,
    absent: Any = 2,
    late: Any = 1,
    total: Any = 20,
) -> dict:
    return dict(
        employee=_make_employee() if employee == "default" else employee,
        present=present,
        absent=absent,
        late=late,
        total=total,
    )


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: Optional[str] = None,
    role: UserRole = UserRole.admin,
    expired: bool = False,
) -> str:
    """Generate an EMS-style JWT for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "id": user_id or _object_id(),
        "role": role.value,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(role=UserRole.admin)}"}


@pytest.fixture
def employee_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(role=UserRole.employee)}"}


# Fixed window used by report tests
REPORT_MONTH = 3
REPORT_YEAR = 2026
