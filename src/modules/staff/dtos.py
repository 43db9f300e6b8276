"""Staff DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateStaffMemberDTO``: input for hiring a staff member.
- ``UpdateStaffMemberDTO``: input for partial updates.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from modules.staff.models import Department, StaffStatus


class CreateStaffMemberDTO(BaseModel):
    """Immutable DTO for staff creation requests.

    Validates:
    - ``email`` is a well-formed address (Pydantic ``EmailStr``).
    - ``department`` and ``status`` are known choices.
    - ``join_date`` defaults to today when omitted.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    position: str
    department: Department
    email: EmailStr
    phone: str = ""
    join_date: date | None = None
    status: StaffStatus = StaffStatus.ACTIVE

    @field_validator("name", "position")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Must not be empty.")
        return v.strip()

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.lower()


class UpdateStaffMemberDTO(BaseModel):
    """Immutable DTO for staff update requests.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    position: str | None = None
    department: Department | None = None
    email: EmailStr | None = None
    phone: str | None = None
    join_date: date | None = None
    status: StaffStatus | None = None

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else v

    def changes(self) -> Dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }
