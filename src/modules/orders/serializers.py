"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.  Output serializers read the engine
records from ``entities.py`` (not ORM rows).
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders import engine
from modules.orders.constants import (
    DEFAULT_UNIT,
    HISTORY_PERIODS,
    NORMAL_FLOW,
    OrderStatus,
)

QUANTITY_FIELD_OPTIONS = {"max_digits": 12, "decimal_places": 3}
AMOUNT_FIELD_OPTIONS = {"max_digits": 14, "decimal_places": 3}

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    """Validates a single fabric line in a create/edit request."""

    fabric = serializers.CharField(max_length=100)
    color = serializers.CharField(
        max_length=100, required=False, default="", allow_blank=True
    )
    quantity = serializers.DecimalField(
        min_value=Decimal("0.001"), **QUANTITY_FIELD_OPTIONS
    )
    unit = serializers.CharField(max_length=32, required=False, default=DEFAULT_UNIT)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload.

    ``customer_name`` is optional for customers (their own name is used)
    and required for staff, which the view enforces.
    """

    customer_name = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )
    items = OrderItemInputSerializer(many=True)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class EditOrderSerializer(serializers.Serializer):
    """Administrative correction.

    ``PUT`` must send every editable field; ``PATCH`` (``partial=True``)
    applies only the supplied ones.
    """

    customer_name = serializers.CharField(max_length=255)
    items = OrderItemInputSerializer(many=True)
    notes = serializers.CharField(allow_blank=True)
    estimated_delivery = serializers.DateTimeField()


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    note = serializers.CharField(required=False, allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True)


class OrderQuerySerializer(serializers.Serializer):
    """Validates list query parameters."""

    search = serializers.CharField(required=False, default="", allow_blank=True)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    period = serializers.ChoiceField(
        choices=["all", *HISTORY_PERIODS], required=False
    )
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    customer = serializers.CharField(required=False)
    ordering = serializers.CharField(required=False)

    def validate_ordering(self, value: str) -> str:
        if value.lstrip("-") not in engine.SORTABLE_FIELDS:
            raise serializers.ValidationError(
                f"Cannot order by '{value}'. Use one of: "
                f"{', '.join(sorted(engine.SORTABLE_FIELDS))}."
            )
        return value


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.Serializer):
    """Read serializer for a fabric line with its priced subtotal."""

    fabric = serializers.CharField(read_only=True)
    color = serializers.CharField(read_only=True)
    quantity = serializers.DecimalField(read_only=True, **QUANTITY_FIELD_OPTIONS)
    unit = serializers.CharField(read_only=True)
    unit_price = serializers.SerializerMethodField()
    subtotal = serializers.SerializerMethodField()

    def get_unit_price(self, item) -> str:
        return str(engine.unit_price(item.fabric))

    def get_subtotal(self, item) -> str:
        return str(engine.unit_price(item.fabric) * item.quantity)


class StatusHistorySerializer(serializers.Serializer):
    status = serializers.CharField(read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)
    note = serializers.CharField(read_only=True)


class OrderListSerializer(serializers.Serializer):
    """Lightweight serializer for order lists (no nested history)."""

    id = serializers.CharField(read_only=True)
    tracking_number = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    total_amount = serializers.DecimalField(read_only=True, **AMOUNT_FIELD_OPTIONS)
    item_count = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField(read_only=True)
    estimated_delivery = serializers.DateTimeField(read_only=True)
    delivered_at = serializers.SerializerMethodField()

    def get_item_count(self, order) -> int:
        return len(order.items)

    def get_delivered_at(self, order):
        value = engine.resolve_delivered_at(order)
        return serializers.DateTimeField().to_representation(value) if value else None


class OrderSerializer(OrderListSerializer):
    """Read serializer for an order with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = serializers.SerializerMethodField()
    notes = serializers.CharField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    def get_status_history(self, order):
        return StatusHistorySerializer(engine.sorted_history(order), many=True).data


class OrderTimelineSerializer(serializers.Serializer):
    """Tracking view: one step per normal-flow status with the time reached."""

    tracking_number = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    estimated_delivery = serializers.DateTimeField(read_only=True)
    steps = serializers.SerializerMethodField()

    def get_steps(self, order):
        statuses = list(NORMAL_FLOW)
        if engine.reached_at(order, OrderStatus.CANCELLED) or (
            order.status == OrderStatus.CANCELLED
        ):
            statuses.append(OrderStatus.CANCELLED)

        field = serializers.DateTimeField()
        steps = []
        for status in statuses:
            reached = engine.reached_at(order, status)
            steps.append(
                {
                    "status": status.value,
                    "label": status.label,
                    "reached_at": field.to_representation(reached) if reached else None,
                    "current": order.status == status,
                }
            )
        return steps


class NextDeliverySerializer(serializers.Serializer):
    tracking_number = serializers.CharField(read_only=True)
    estimated_delivery = serializers.DateTimeField(read_only=True)
    days_remaining = serializers.IntegerField(read_only=True)


class CustomerSummarySerializer(serializers.Serializer):
    """Reads an ``engine.CustomerSummary``."""

    total_orders = serializers.IntegerField(read_only=True)
    active_orders = serializers.IntegerField(read_only=True)
    completed_orders = serializers.IntegerField(read_only=True)
    total_spent = serializers.DecimalField(read_only=True, **AMOUNT_FIELD_OPTIONS)
    next_delivery = NextDeliverySerializer(read_only=True, allow_null=True)
    orders_this_month = serializers.IntegerField(read_only=True)
    orders_last_month = serializers.IntegerField(read_only=True)
    monthly_trend = serializers.IntegerField(read_only=True)
    by_month = serializers.DictField(child=serializers.IntegerField(), read_only=True)
