"""Inventory item model: dyes, fabrics, chemicals and equipment on hand.

Business rules implemented:
- An item name is unique within its category.
- ``quantity`` and ``threshold`` cannot be negative.
- An item is *low stock* when ``quantity <= threshold``.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class InventoryCategory(models.TextChoices):
    DYE = "Dye", "Dye"
    FABRIC = "Fabric", "Fabric"
    CHEMICAL = "Chemical", "Chemical"
    EQUIPMENT = "Equipment", "Equipment"


class InventoryItem(BaseModel):
    """Stock record for one material.  ``updated_at`` doubles as *last updated*."""

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=InventoryCategory.choices)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    unit = models.CharField(max_length=32)
    description = models.TextField(blank=True, default="")
    threshold = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        db_table = "inventory_items"
        ordering = ["category", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["category", "name"],
                name="inventory_items_category_name_uniq",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name="inventory_items_quantity_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(threshold__gte=0),
                name="inventory_items_threshold_non_negative",
            ),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.threshold

    @property
    def last_updated(self):
        return self.updated_at

    def __str__(self) -> str:
        return f"{self.name} ({self.category}): {self.quantity} {self.unit}"
