"""Wire models shared by the leave and report modules.

The EMS backend sends camelCase JSON in which any embedded reference may be
missing, ``null``, or an unpopulated id string. Only a JSON object counts as
a resolved reference; anything else is read as ``None``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def object_or_none(value: Any) -> Optional[dict]:
    """Return *value* if it is a JSON object, else ``None``."""
    return value if isinstance(value, dict) else None


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def lenient_text(value: Any) -> Optional[str]:
    """Strings pass (blank reads as absent), numbers become text, anything else ``None``."""
    if isinstance(value, str):
        return blank_to_none(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class DepartmentRef(BaseModel):
    """Department embedded in an employee reference."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None

    _name = field_validator("name", mode="before")(lenient_text)


class EmployeeRef(BaseModel):
    """Employee embedded in leave and report records. Read-only here."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    department: Optional[DepartmentRef] = None

    _text = field_validator(
        "first_name", "last_name", "email", mode="before",
    )(lenient_text)

    @field_validator("department", mode="before")
    @classmethod
    def _department_object(cls, v: Any) -> Optional[dict]:
        return object_or_none(v)

    @property
    def department_name(self) -> Optional[str]:
        return self.department.name if self.department else None
