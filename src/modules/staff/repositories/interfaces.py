"""Staff repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.staff.models import StaffMember


class IStaffRepository(IRepository["StaffMember"]):
    """Repository contract for staff members."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[StaffMember]":
        """List staff with optional filters."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[StaffMember]:
        """Retrieve a staff member by e-mail (case-insensitive)."""

    @abstractmethod
    def count_by_status(self, status: str) -> int:
        """Number of staff members with the given employment status."""
