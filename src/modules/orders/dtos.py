"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: input for order creation.  The item list is not
  checked for emptiness here; the lifecycle engine owns that rule.
- ``EditOrderDTO``: administrative correction; only fields explicitly set
  are applied.
- ``UpdateStatusDTO``: target status plus optional note.
- ``OrderQueryDTO``: search, date window, status/customer narrowing and
  ordering for order and history lists.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import HISTORY_PERIODS, OrderStatus, SortDirection
from modules.orders.entities import OrderItem


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests."""

    model_config = ConfigDict(frozen=True)

    customer_name: str
    items: List[OrderItem]
    notes: Optional[str] = ""


class EditOrderDTO(BaseModel):
    """Immutable DTO for administrative order edits.

    All fields are optional.  ``changes()`` returns only the fields the
    caller actually supplied, so ``notes=""`` clears notes while an
    omitted ``notes`` leaves them alone.
    """

    model_config = ConfigDict(frozen=True)

    customer_name: Optional[str] = None
    items: Optional[List[OrderItem]] = None
    notes: Optional[str] = None
    estimated_delivery: Optional[datetime] = None

    def changes(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in self.model_fields_set}


class UpdateStatusDTO(BaseModel):
    """Immutable DTO for a status change.  A blank note means "use the default"."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    note: Optional[str] = None

    @field_validator("note")
    @classmethod
    def blank_note_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class OrderQueryDTO(BaseModel):
    """Immutable DTO describing an order list request.

    ``start_date``/``end_date`` take precedence over ``period``.
    ``ordering`` follows the DRF convention: ``field`` or ``-field``.
    """

    model_config = ConfigDict(frozen=True)

    search: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    period: Optional[str] = None
    status: Optional[OrderStatus] = None
    customer_name: Optional[str] = None
    ordering: str = "-created_at"

    @field_validator("period")
    @classmethod
    def period_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        if v in (None, "", "all"):
            return None
        if v not in HISTORY_PERIODS:
            raise ValueError(
                f"Unknown period '{v}'. Use one of: all, {', '.join(HISTORY_PERIODS)}."
            )
        return v

    @model_validator(mode="after")
    def dates_must_be_ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date.")
        return self

    @property
    def sort_field(self) -> str:
        return self.ordering.lstrip("-")

    @property
    def sort_direction(self) -> str:
        return SortDirection.DESC if self.ordering.startswith("-") else SortDirection.ASC
