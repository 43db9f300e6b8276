"""Django ORM implementation of the Staff repository.

Methods return ``None``/``False`` for missing rows; the Service Layer
decides how to translate that into an error.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.staff.models import StaffMember
from modules.staff.repositories.interfaces import IStaffRepository

logger = structlog.get_logger(__name__)


class StaffDjangoRepository(IStaffRepository):
    """Concrete staff repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[StaffMember]:
        try:
            return StaffMember.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[StaffMember]":
        queryset = StaffMember.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: StaffMember) -> StaffMember:
        entity.save()
        logger.info(
            "staff.saved",
            staff_id=str(entity.id),
            department=entity.department,
            status=entity.status,
        )
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        member = self.get_by_id(id)
        if not member:
            return False
        member.delete()
        logger.info("staff.deleted", staff_id=str(id))
        return True

    def get_by_email(self, email: str) -> Optional[StaffMember]:
        return StaffMember.objects.filter(email__iexact=email.strip()).first()

    def count_by_status(self, status: str) -> int:
        return StaffMember.objects.filter(status=status).count()
