"""Order, OrderItem, and OrderStatusHistory models.

Storage side of the Persistence Gateway.  The lifecycle engine never
touches these models; ``OrderDjangoRepository`` maps them to and from
``modules.orders.entities``.

- ``tracking_number`` is indexed but deliberately **not** unique.
- ``created_at`` is supplied by the engine (overrides ``auto_now_add``)
  so ``estimated_delivery`` stays exactly ``created_at + lead time``.
- ``OrderItem`` and ``OrderStatusHistory`` keep an explicit ``position``
  so insertion order survives a round-trip.
- ``OrderStatusHistory`` rows are append-only.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import DEFAULT_UNIT, OrderStatus


class Order(BaseModel):
    """Order aggregate root (storage model)."""

    tracking_number = models.CharField(max_length=16, db_index=True)
    customer_name = models.CharField(max_length=255, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal("0"),
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    estimated_delivery = models.DateTimeField()
    delivered_at = models.DateTimeField(null=True, blank=True, default=None)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.tracking_number} ({self.status})"


class OrderItem(BaseModel):
    """One fabric line of a dyeing order."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    position = models.PositiveIntegerField(default=0)
    fabric = models.CharField(max_length=100)
    color = models.CharField(max_length=100, blank=True, default="")
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    unit = models.CharField(max_length=32, default=DEFAULT_UNIT)

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_items_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.fabric} / {self.color} x{self.quantity} {self.unit}"


class OrderStatusHistory(BaseModel):
    """Append-only ledger of status changes.

    ``timestamp`` is the engine's clock at the time of the change;
    ``created_at`` is only storage bookkeeping.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    position = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=OrderStatus.choices)
    timestamp = models.DateTimeField()
    note = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["position"]
        indexes = [
            models.Index(
                fields=["order", "position"],
                name="osh_order_position_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.status} @ {self.timestamp:%Y-%m-%d %H:%M}"
