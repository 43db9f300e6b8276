"""Inventory DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateInventoryItemDTO``: input for item creation.
- ``UpdateInventoryItemDTO``: input for partial updates.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, field_validator

from modules.inventory.models import InventoryCategory

MAX_DECIMAL_PLACES = 3


def _check_amount(v: Decimal | None, label: str) -> Decimal | None:
    if v is None:
        return v
    if v < 0:
        raise ValueError(f"{label} cannot be negative.")
    if v.as_tuple().exponent < -MAX_DECIMAL_PLACES:
        raise ValueError(f"{label} allows at most {MAX_DECIMAL_PLACES} decimal places.")
    return v


class CreateInventoryItemDTO(BaseModel):
    """Immutable DTO for inventory item creation requests.

    Validates:
    - ``name`` and ``unit`` are non-empty.
    - ``category`` is one of Dye, Fabric, Chemical, Equipment.
    - ``quantity`` and ``threshold`` are non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    category: InventoryCategory
    quantity: Decimal = Decimal("0")
    unit: str
    description: str = ""
    threshold: Decimal = Decimal("0")

    @field_validator("name", "unit")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Must not be empty.")
        return v.strip()

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_valid(cls, v: Decimal) -> Decimal:
        return _check_amount(v, "Quantity")

    @field_validator("threshold")
    @classmethod
    def threshold_must_be_valid(cls, v: Decimal) -> Decimal:
        return _check_amount(v, "Threshold")


class UpdateInventoryItemDTO(BaseModel):
    """Immutable DTO for inventory item updates.

    All fields are optional; only supplied fields will be updated.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    category: InventoryCategory | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    description: str | None = None
    threshold: Decimal | None = None

    @field_validator("name", "unit")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Must not be empty.")
        return v.strip() if v is not None else v

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_valid(cls, v: Decimal | None) -> Decimal | None:
        return _check_amount(v, "Quantity")

    @field_validator("threshold")
    @classmethod
    def threshold_must_be_valid(cls, v: Decimal | None) -> Decimal | None:
        return _check_amount(v, "Threshold")

    def changes(self) -> Dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }
