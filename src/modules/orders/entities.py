"""Order records handled by the lifecycle engine.

Plain Pydantic v2 models, independent of the ORM.  ``OrderItem`` and
``StatusHistoryEntry`` are immutable (``frozen=True``); ``Order`` is the
mutable aggregate root the engine operates on.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import DEFAULT_UNIT, TERMINAL_STATES, OrderStatus


class OrderItem(BaseModel):
    """One line item of a dyeing job."""

    model_config = ConfigDict(frozen=True)

    fabric: str
    color: str = ""
    quantity: Decimal
    unit: str = DEFAULT_UNIT

    @field_validator("fabric")
    @classmethod
    def fabric_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Fabric must not be empty.")
        return v.strip()

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Quantity must be greater than zero.")
        return v


class StatusHistoryEntry(BaseModel):
    """A single recorded status change.  Never edited once written."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    timestamp: datetime
    note: str = ""


class Order(BaseModel):
    """Order aggregate root.

    ``id`` is ``None`` until the Persistence Gateway inserts the order.
    ``status_history`` is append-only; only the engine appends to it.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = None
    tracking_number: str
    customer_name: str
    items: List[OrderItem]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    estimated_delivery: datetime
    delivered_at: Optional[datetime] = None
    notes: str = ""
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES
