"""Unit tests for engine filtering, sorting, date ranges and the dashboard summary."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from modules.orders import engine
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InvalidOrderError

pytestmark = pytest.mark.unit

BASE = datetime(2024, 1, 10, 12, 0, tzinfo=dt_timezone.utc)


def _order(customer: str, fabric: str, quantity: str, days: int, color: str = "Red"):
    return engine.create_order(
        customer,
        [{"fabric": fabric, "color": color, "quantity": Decimal(quantity)}],
        now=BASE + timedelta(days=days),
    )


@pytest.fixture()
def orders():
    return [
        _order("Ana Souza", "Cotton", "10", 0, color="Indigo"),  # 50
        _order("Bruno Lima", "Silk", "10", 5),  # 120
        _order("Carla Mendes", "Velvet", "1", 10),  # 15
        _order("ana maria", "Wool", "3", 20),  # 30
    ]


class TestFilterOrders:
    def test_no_criteria_returns_everything(self, orders):
        assert engine.filter_orders(orders) == orders

    def test_search_is_case_insensitive_on_customer(self, orders):
        result = engine.filter_orders(orders, query="ANA")
        assert [o.customer_name for o in result] == ["Ana Souza", "ana maria"]

    def test_search_matches_tracking_number(self, orders):
        target = orders[2]
        result = engine.filter_orders(orders, query=target.tracking_number.lower())
        assert target in result

    def test_search_without_match_returns_empty(self, orders):
        assert engine.filter_orders(orders, query="no-such-customer-zzz") == []

    def test_items_only_searched_when_requested(self, orders):
        assert engine.filter_orders(orders, query="indigo") == []
        result = engine.filter_orders(orders, query="indigo", match_items=True)
        assert result == [orders[0]]

    def test_date_range_is_inclusive(self, orders):
        window = engine.DateRange(start=orders[1].created_at, end=orders[2].created_at)
        assert engine.filter_orders(orders, date_range=window) == orders[1:3]

    def test_calendar_dates_cover_whole_days(self, orders):
        window = engine.DateRange.from_dates(date(2024, 1, 15), date(2024, 1, 20))
        assert engine.filter_orders(orders, date_range=window) == orders[1:3]

    def test_open_ended_range(self, orders):
        window = engine.DateRange.from_dates(start_date=date(2024, 1, 20))
        assert engine.filter_orders(orders, date_range=window) == orders[2:]

    def test_delivered_filter_skips_undelivered(self, orders):
        engine.update_status(orders[0], OrderStatus.COMPLETED, now=BASE + timedelta(days=30))
        window = engine.DateRange.from_dates(date(2024, 2, 1), date(2024, 2, 29))

        result = engine.filter_orders(orders, date_range=window, date_field="delivered_at")
        assert result == [orders[0]]

    def test_last_days_window(self):
        window = engine.DateRange.last_days(30, now=BASE)
        assert window.start == BASE - timedelta(days=30)
        assert window.end == BASE

    def test_unknown_date_field_rejected(self, orders):
        with pytest.raises(InvalidOrderError):
            engine.filter_orders(orders, date_field="estimated_delivery")


class TestSortOrders:
    def test_total_amount_asc_and_desc_are_reversed(self, orders):
        ascending = engine.sort_orders(orders, "total_amount", "asc")
        descending = engine.sort_orders(orders, "total_amount", "desc")

        assert [o.total_amount for o in ascending] == [
            Decimal("15"),
            Decimal("30"),
            Decimal("50"),
            Decimal("120"),
        ]
        assert descending == list(reversed(ascending))

    def test_default_is_newest_first(self, orders):
        assert engine.sort_orders(orders) == list(reversed(orders))

    def test_strings_sort_lexicographically(self, orders):
        result = engine.sort_orders(orders, "customer_name", "asc")
        assert [o.customer_name for o in result] == [
            "Ana Souza",
            "Bruno Lima",
            "Carla Mendes",
            "ana maria",
        ]

    def test_missing_values_go_last_both_ways(self, orders):
        engine.update_status(orders[3], OrderStatus.COMPLETED, now=BASE + timedelta(days=40))
        engine.update_status(orders[1], OrderStatus.COMPLETED, now=BASE + timedelta(days=41))

        for direction in ("asc", "desc"):
            result = engine.sort_orders(orders, "delivered_at", direction)
            assert result[2:] == [orders[0], orders[2]]

    def test_delivered_at_falls_back_to_completion_history(self, orders):
        engine.update_status(orders[0], OrderStatus.COMPLETED, now=BASE + timedelta(days=40))
        engine.update_status(orders[1], OrderStatus.COMPLETED, now=BASE + timedelta(days=30))
        orders[0].delivered_at = None

        result = engine.sort_orders(orders[:2], "delivered_at", "desc")
        assert result == [orders[0], orders[1]]

        result = engine.sort_orders(orders[:2], "delivered_at", "asc")
        assert result == [orders[1], orders[0]]

    def test_ties_keep_input_order(self):
        same = [_order(f"Customer {i}", "Cotton", "1", 0) for i in range(5)]
        assert engine.sort_orders(same, "total_amount", "asc") == same
        assert engine.sort_orders(same, "total_amount", "desc") == same

    def test_unknown_field_rejected(self, orders):
        with pytest.raises(InvalidOrderError):
            engine.sort_orders(orders, "items")

    def test_unknown_direction_rejected(self, orders):
        with pytest.raises(InvalidOrderError):
            engine.sort_orders(orders, "created_at", "sideways")


class TestSummarize:
    def test_counts_by_status_and_month(self, orders):
        engine.update_status(orders[0], OrderStatus.COMPLETED, now=BASE)
        engine.update_status(orders[1], OrderStatus.CANCELLED, now=BASE)
        engine.update_status(orders[2], OrderStatus.PROCESSING, now=BASE)

        summary = engine.summarize(orders)

        assert summary.total_orders == 4
        assert summary.active_orders == 2
        assert summary.by_status == {
            "pending": 1,
            "processing": 1,
            "ready": 0,
            "completed": 1,
            "cancelled": 1,
        }
        assert summary.by_month == {"2024-01": 4}

    def test_empty(self):
        summary = engine.summarize([])
        assert summary.total_orders == 0
        assert summary.active_orders == 0
        assert summary.by_month == {}


class TestCustomerSummary:
    NOW = datetime(2024, 3, 5, 8, 0, tzinfo=dt_timezone.utc)

    @staticmethod
    def _placed(at, fabric, quantity="1"):
        return engine.create_order(
            "Ana Souza", [{"fabric": fabric, "quantity": Decimal(quantity)}], now=at
        )

    @pytest.fixture()
    def history(self):
        jan = self._placed(datetime(2024, 1, 20, tzinfo=dt_timezone.utc), "Cotton", "2")
        feb = self._placed(datetime(2024, 2, 10, tzinfo=dt_timezone.utc), "Silk")
        feb_cancelled = self._placed(datetime(2024, 2, 25, tzinfo=dt_timezone.utc), "Velvet")
        mar = self._placed(datetime(2024, 3, 1, 10, 0, tzinfo=dt_timezone.utc), "Linen")
        mar_processing = self._placed(datetime(2024, 3, 4, 9, 0, tzinfo=dt_timezone.utc), "Wool")
        mar_latest = self._placed(datetime(2024, 3, 5, 7, 0, tzinfo=dt_timezone.utc), "Denim")

        engine.update_status(jan, OrderStatus.COMPLETED, now=datetime(2024, 2, 1, tzinfo=dt_timezone.utc))
        engine.update_status(feb, OrderStatus.COMPLETED, now=datetime(2024, 2, 20, tzinfo=dt_timezone.utc))
        engine.update_status(feb_cancelled, OrderStatus.CANCELLED, now=self.NOW)
        engine.update_status(mar_processing, OrderStatus.PROCESSING, now=self.NOW)
        return [jan, feb, feb_cancelled, mar, mar_processing, mar_latest]

    def test_counts_and_total_spent(self, history):
        summary = engine.customer_summary(history, now=self.NOW)

        assert summary.total_orders == 6
        assert summary.active_orders == 3
        assert summary.completed_orders == 2
        assert summary.total_spent == Decimal("22")

    def test_next_delivery_is_earliest_active_estimate(self, history):
        summary = engine.customer_summary(history, now=self.NOW)

        assert summary.next_delivery.tracking_number == history[3].tracking_number
        assert summary.next_delivery.estimated_delivery == history[3].estimated_delivery
        assert summary.next_delivery.days_remaining == 11

    def test_monthly_trend_and_recent_months(self, history):
        summary = engine.customer_summary(history, now=self.NOW)

        assert summary.orders_this_month == 3
        assert summary.orders_last_month == 2
        assert summary.monthly_trend == 50
        assert summary.by_month == {
            "2023-10": 0,
            "2023-11": 0,
            "2023-12": 0,
            "2024-01": 1,
            "2024-02": 2,
            "2024-03": 3,
        }

    def test_overdue_delivery_counts_negative_days(self, history):
        later = self.NOW + timedelta(days=12)
        summary = engine.customer_summary(history, now=later)
        assert summary.next_delivery.days_remaining == -1

    def test_first_orders_count_as_full_growth(self):
        orders = [self._placed(self.NOW - timedelta(days=1), "Cotton")]
        assert engine.customer_summary(orders, now=self.NOW).monthly_trend == 100

    def test_decline_rounds_half_up(self, history):
        older = [history[1], history[2], self._placed(datetime(2024, 2, 2, tzinfo=dt_timezone.utc), "Wool")]
        current = [history[5]]

        summary = engine.customer_summary(older + current, now=self.NOW)

        assert summary.orders_last_month == 3
        assert summary.monthly_trend == -67

    def test_last_month_wraps_the_year(self):
        december = self._placed(datetime(2023, 12, 28, tzinfo=dt_timezone.utc), "Cotton")
        now = datetime(2024, 1, 3, tzinfo=dt_timezone.utc)

        summary = engine.customer_summary([december], now=now)

        assert summary.orders_last_month == 1
        assert summary.monthly_trend == -100

    def test_no_orders(self):
        summary = engine.customer_summary([], now=self.NOW)

        assert summary.total_orders == 0
        assert summary.total_spent == Decimal("0")
        assert summary.next_delivery is None
        assert summary.monthly_trend == 0
        assert list(summary.by_month.values()) == [0] * 6
