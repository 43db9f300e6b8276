"""Unit tests for order records and DTO validation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from modules.orders.constants import OrderStatus, SortDirection
from modules.orders.dtos import EditOrderDTO, OrderQueryDTO, UpdateStatusDTO
from modules.orders.entities import OrderItem

pytestmark = pytest.mark.unit


class TestOrderItem:
    def test_defaults(self):
        item = OrderItem(fabric="Linen", quantity=Decimal("2"))
        assert item.color == ""
        assert item.unit == "meters"

    def test_fabric_is_trimmed(self):
        assert OrderItem(fabric="  Wool ", quantity=1).fabric == "Wool"

    @pytest.mark.parametrize("quantity", ["0", "-1.5"])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError):
            OrderItem(fabric="Cotton", quantity=Decimal(quantity))

    def test_blank_fabric_rejected(self):
        with pytest.raises(ValidationError):
            OrderItem(fabric=" ", quantity=1)

    def test_items_are_immutable(self):
        item = OrderItem(fabric="Cotton", quantity=1)
        with pytest.raises(ValidationError):
            item.quantity = Decimal("3")


class TestEditOrderDTO:
    def test_changes_only_contains_supplied_fields(self):
        assert EditOrderDTO(notes="").changes() == {"notes": ""}

    def test_nothing_supplied(self):
        assert EditOrderDTO().changes() == {}

    def test_explicit_none_is_kept(self):
        assert EditOrderDTO(estimated_delivery=None).changes() == {"estimated_delivery": None}


class TestUpdateStatusDTO:
    def test_blank_note_becomes_none(self):
        assert UpdateStatusDTO(status="ready", note="   ").note is None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            UpdateStatusDTO(status="shipped")

    def test_status_is_coerced(self):
        assert UpdateStatusDTO(status="completed").status == OrderStatus.COMPLETED


class TestOrderQueryDTO:
    def test_defaults_to_newest_first(self):
        query = OrderQueryDTO()
        assert query.sort_field == "created_at"
        assert query.sort_direction == SortDirection.DESC

    def test_plain_field_sorts_ascending(self):
        query = OrderQueryDTO(ordering="total_amount")
        assert query.sort_field == "total_amount"
        assert query.sort_direction == SortDirection.ASC

    @pytest.mark.parametrize("period", ["", "all", None])
    def test_all_time_period_is_none(self, period):
        assert OrderQueryDTO(period=period).period is None

    def test_known_period_kept(self):
        assert OrderQueryDTO(period="last-90").period == "last-90"

    def test_unknown_period_rejected(self):
        with pytest.raises(ValidationError, match="Unknown period"):
            OrderQueryDTO(period="last-7")

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            OrderQueryDTO(start_date=date(2024, 5, 2), end_date=date(2024, 5, 1))

    def test_same_day_range_accepted(self):
        query = OrderQueryDTO(start_date=date(2024, 5, 1), end_date=date(2024, 5, 1))
        assert query.start_date == query.end_date
