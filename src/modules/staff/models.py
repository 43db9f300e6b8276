"""Staff member model.

Business rules implemented:
- E-mail is unique (stored lower-cased).
- Department and employment status are closed choice sets.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel


class Department(models.TextChoices):
    PRODUCTION = "Production", "Production"
    QA = "QA", "Quality Assurance"
    RND = "R&D", "Research & Development"
    MANAGEMENT = "Management", "Management"
    LOGISTICS = "Logistics", "Logistics"


class StaffStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    ON_LEAVE = "on leave", "On leave"
    TERMINATED = "terminated", "Terminated"


class StaffMember(BaseModel):
    name = models.CharField(max_length=255)
    position = models.CharField(max_length=120)
    department = models.CharField(max_length=20, choices=Department.choices)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True, default="")
    join_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=20,
        choices=StaffStatus.choices,
        default=StaffStatus.ACTIVE,
    )

    class Meta:
        db_table = "staff_members"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["department"], name="staff_department_idx"),
            models.Index(fields=["status"], name="staff_status_idx"),
        ]

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} - {self.position} ({self.department})"
