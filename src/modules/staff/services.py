"""Staff service layer (Use Cases).

Business rules enforced here:
- E-mail must be unique across staff members.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.staff.exceptions import StaffMemberAlreadyExists, StaffMemberNotFound
from modules.staff.models import StaffMember, StaffStatus

if TYPE_CHECKING:
    from modules.staff.dtos import CreateStaffMemberDTO, UpdateStaffMemberDTO
    from modules.staff.repositories.interfaces import IStaffRepository

logger = structlog.get_logger(__name__)


class StaffService:
    """Application service for staff use-cases.

    Receives an ``IStaffRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IStaffRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_member(self, dto: CreateStaffMemberDTO) -> StaffMember:
        """Register a staff member.

        Raises:
            StaffMemberAlreadyExists: the e-mail is already in use.
        """
        log = logger.bind(email=dto.email, department=str(dto.department))

        if self._repo.get_by_email(dto.email):
            log.warning("staff.duplicate_email")
            raise StaffMemberAlreadyExists("Email already registered.")

        member = StaffMember(
            name=dto.name,
            position=dto.position,
            department=dto.department,
            email=dto.email,
            phone=dto.phone,
            join_date=dto.join_date or timezone.localdate(),
            status=dto.status,
        )
        member = self._repo.save(member)
        log.info("staff.created", staff_id=str(member.id))
        return member

    @transaction.atomic
    def update_member(self, id: str, dto: UpdateStaffMemberDTO) -> StaffMember:
        """Update an existing staff member with the supplied fields.

        Raises:
            StaffMemberNotFound: the member does not exist.
            StaffMemberAlreadyExists: the new e-mail collides.
        """
        member = self._repo.get_by_id(id)
        if not member:
            raise StaffMemberNotFound(f"Staff member {id} not found.")

        log = logger.bind(staff_id=str(id))
        changes = dto.changes()

        if "email" in changes:
            existing = self._repo.get_by_email(changes["email"])
            if existing and existing.id != member.id:
                log.warning("staff.duplicate_email")
                raise StaffMemberAlreadyExists("Email already registered.")

        for field, value in changes.items():
            setattr(member, field, value)

        member = self._repo.save(member)
        log.info("staff.updated", fields=sorted(changes))
        return member

    @transaction.atomic
    def delete_member(self, id: str) -> None:
        """Raises ``StaffMemberNotFound`` if the member does not exist."""
        if not self._repo.delete(id):
            raise StaffMemberNotFound(f"Staff member {id} not found.")
        logger.info("staff.removed", staff_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_members(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[StaffMember]":
        return self._repo.list(filters)

    def get_member(self, id: str) -> StaffMember:
        """Raises ``StaffMemberNotFound`` if the member does not exist."""
        member = self._repo.get_by_id(id)
        if not member:
            raise StaffMemberNotFound(f"Staff member {id} not found.")
        return member

    def count_active(self) -> int:
        return self._repo.count_by_status(StaffStatus.ACTIVE)
