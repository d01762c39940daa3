"""Auth dependencies — JWT validation and role lookup.

Tokens are issued by the EMS backend; the console only verifies them and
forwards them unchanged to the data service.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from admin_console.common.constants import UserRole
from admin_console.config import settings


class CurrentUser(BaseModel):
    """The authenticated caller, as described by their access token."""

    id: str
    role: UserRole = UserRole.employee
    token: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(request: Request) -> CurrentUser:
    """Validate the JWT and return the caller it identifies."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    # EMS tokens carry the user id as ``id``; standard ``sub`` is accepted too
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token has no subject.")

    try:
        role = UserRole(payload.get("role", UserRole.employee.value))
    except ValueError:
        role = UserRole.employee

    return CurrentUser(id=str(user_id), role=role, token=token)
