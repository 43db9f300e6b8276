"""Django ORM implementation of the Order Persistence Gateway.

Satisfies ``IOrderRepository`` using Django's QuerySet API and maps ORM
rows to the engine records in ``modules.orders.entities``.

The database alias is injected through the constructor; the connection
itself is owned by Django's connection handler (opened lazily, closed at
the end of each request).  Multi-row writes run inside
``transaction.atomic`` on that alias.  No row locks are taken.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, transaction

from modules.orders import entities
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "customer_name",
        "items",
        "total_amount",
        "status",
        "estimated_delivery",
        "delivered_at",
        "notes",
    }
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order gateway backed by Django ORM."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self._using = using

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def fetch_all(self, customer_name: Optional[str] = None) -> List[entities.Order]:
        """Return all orders (newest first) with items and history prefetched."""
        queryset = self._queryset()
        if customer_name is not None:
            queryset = queryset.filter(customer_name=customer_name)
        return [_to_entity(row) for row in queryset]

    def fetch_by_id(self, id: str) -> entities.Order:
        return _to_entity(self._get_row(id, prefetch=True))

    def fetch_by_tracking_number(
        self, tracking_number: str, customer_name: Optional[str] = None
    ) -> entities.Order:
        queryset = self._queryset().filter(tracking_number=tracking_number.strip().upper())
        if customer_name is not None:
            queryset = queryset.filter(customer_name=customer_name)
        row = queryset.order_by("-created_at").first()
        if row is None:
            raise OrderNotFound(f"No order with tracking number {tracking_number}.")
        return _to_entity(row)

    def tracking_number_exists(self, tracking_number: str) -> bool:
        return (
            Order.objects.using(self._using)
            .filter(tracking_number=tracking_number)
            .exists()
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def insert(self, order: entities.Order) -> entities.Order:
        """Store the order with its items and any existing history."""
        with transaction.atomic(using=self._using):
            row = Order(
                tracking_number=order.tracking_number,
                customer_name=order.customer_name,
                status=order.status,
                total_amount=order.total_amount,
                created_at=order.created_at,
                estimated_delivery=order.estimated_delivery,
                delivered_at=order.delivered_at,
                notes=order.notes,
            )
            row.save(using=self._using)
            self._write_items(row, order.items)
            OrderStatusHistory.objects.using(self._using).bulk_create(
                [
                    _history_row(row, position, entry)
                    for position, entry in enumerate(order.status_history)
                ]
            )

        logger.info(
            "order.inserted",
            order_id=str(row.id),
            tracking_number=row.tracking_number,
            item_count=len(order.items),
        )
        return order.model_copy(update={"id": str(row.id), "updated_at": row.updated_at})

    def apply_update(self, id: str, fields: Mapping[str, Any]) -> None:
        """Overwrite top-level fields; ``items`` replaces every line item."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}.")

        with transaction.atomic(using=self._using):
            row = self._get_row(id)
            for field, value in fields.items():
                if field != "items":
                    setattr(row, field, value)
            row.save(using=self._using)

            if "items" in fields:
                row.items.all().delete()
                self._write_items(row, fields["items"])

        logger.info("order.updated", order_id=str(id), fields=sorted(fields))

    def append_history(self, id: str, entry: entities.StatusHistoryEntry) -> None:
        with transaction.atomic(using=self._using):
            row = self._get_row(id)
            position = row.status_history.count()
            _history_row(row, position, entry).save(using=self._using)

        logger.info(
            "order.history_appended",
            order_id=str(id),
            status=str(entry.status),
            position=position,
        )

    def delete(self, id: str) -> None:
        row = self._get_row(id)
        row.delete()
        logger.info("order.deleted", order_id=str(id))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _queryset(self):
        return Order.objects.using(self._using).prefetch_related(
            "items", "status_history"
        )

    def _get_row(self, id: str, prefetch: bool = False) -> Order:
        """Return the ORM row or raise ``OrderNotFound``.

        Malformed ids are treated as missing.
        """
        queryset = self._queryset() if prefetch else Order.objects.using(self._using)
        try:
            row = queryset.filter(id=id).first()
        except (ValueError, ValidationError):
            row = None
        if row is None:
            raise OrderNotFound(f"Order {id} not found.")
        return row

    def _write_items(self, row: Order, items: Iterable[entities.OrderItem]) -> None:
        OrderItem.objects.using(self._using).bulk_create(
            [
                OrderItem(
                    order=row,
                    position=position,
                    fabric=item.fabric,
                    color=item.color,
                    quantity=item.quantity,
                    unit=item.unit,
                )
                for position, item in enumerate(items)
            ]
        )


def _history_row(
    row: Order, position: int, entry: entities.StatusHistoryEntry
) -> OrderStatusHistory:
    return OrderStatusHistory(
        order=row,
        position=position,
        status=entry.status,
        timestamp=entry.timestamp,
        note=entry.note,
    )


def _to_entity(row: Order) -> entities.Order:
    return entities.Order(
        id=str(row.id),
        tracking_number=row.tracking_number,
        customer_name=row.customer_name,
        items=[
            entities.OrderItem(
                fabric=item.fabric,
                color=item.color,
                quantity=item.quantity,
                unit=item.unit,
            )
            for item in row.items.all()
        ],
        total_amount=row.total_amount,
        status=row.status,
        created_at=row.created_at,
        estimated_delivery=row.estimated_delivery,
        delivered_at=row.delivered_at,
        notes=row.notes,
        status_history=[
            entities.StatusHistoryEntry(
                status=entry.status,
                timestamp=entry.timestamp,
                note=entry.note,
            )
            for entry in row.status_history.all()
        ],
        updated_at=row.updated_at,
    )
