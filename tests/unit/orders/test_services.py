"""Unit tests for OrderService with a mocked Persistence Gateway."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from modules.orders import engine
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, EditOrderDTO, OrderQueryDTO
from modules.orders.entities import OrderItem
from modules.orders.events import OrderCancelled, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderError, OrderNotFound
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=dt_timezone.utc)


@pytest.fixture()
def repo():
    repo = MagicMock()
    repo.tracking_number_exists.return_value = False
    repo.insert.side_effect = lambda order: order.model_copy(update={"id": "order-1"})
    return repo


@pytest.fixture()
def bus():
    return MagicMock()


@pytest.fixture()
def service(repo, bus):
    return OrderService(order_repository=repo, event_bus=bus)


@pytest.fixture()
def stored(new_order):
    return new_order.model_copy(update={"id": "order-1"})


def _create_dto(**overrides):
    data = {
        "customer_name": "Ana Souza",
        "items": [OrderItem(fabric="Cotton", color="Blue", quantity=Decimal("50"))],
        "notes": "",
    }
    data.update(overrides)
    return CreateOrderDTO(**data)


class TestCreateOrder:
    def test_inserts_priced_pending_order(self, service, repo):
        order = service.create_order(_create_dto())

        repo.insert.assert_called_once()
        inserted = repo.insert.call_args.args[0]
        assert inserted.status == OrderStatus.PENDING
        assert inserted.total_amount == Decimal("250")
        assert inserted.status_history == []
        assert order.id == "order-1"

    def test_publishes_order_created(self, service, bus):
        order = service.create_order(_create_dto())

        event = bus.publish.call_args.args[0]
        assert isinstance(event, OrderCreated)
        assert event.aggregate_id == "order-1"
        assert event.tracking_number == order.tracking_number

    def test_empty_items_rejected_before_insert(self, service, repo, bus):
        with pytest.raises(InvalidOrderError):
            service.create_order(_create_dto(items=[]))
        repo.insert.assert_not_called()
        bus.publish.assert_not_called()

    def test_taken_tracking_number_is_rerolled(self, service, repo):
        repo.tracking_number_exists.side_effect = [True, False]
        with patch(
            "modules.orders.engine.generate_tracking_number",
            side_effect=["DYE00001", "DYE00002"],
        ):
            order = service.create_order(_create_dto())

        assert order.tracking_number == "DYE00002"
        assert repo.tracking_number_exists.call_count == 2

    def test_collision_accepted_after_max_retries(self, service, repo, caplog):
        repo.tracking_number_exists.return_value = True
        with patch("modules.orders.services.TRACKING_NUMBER_MAX_RETRIES", 3):
            with caplog.at_level(logging.WARNING):
                order = service.create_order(_create_dto())

        assert repo.tracking_number_exists.call_count == 3
        assert order.tracking_number.startswith("DYE")
        assert any(
            "order.tracking_number_collision" in record.getMessage()
            for record in caplog.records
        )


class TestUpdateStatus:
    def test_persists_status_and_history(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored

        order = service.update_status("order-1", "processing", "Vat 3")

        repo.apply_update.assert_called_once_with(
            "order-1", {"status": OrderStatus.PROCESSING}
        )
        entry = repo.append_history.call_args.args[1]
        assert entry.status == OrderStatus.PROCESSING
        assert entry.note == "Vat 3"
        assert order.status == OrderStatus.PROCESSING

    def test_completion_persists_delivered_at(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored

        order = service.update_status("order-1", OrderStatus.COMPLETED)

        fields = repo.apply_update.call_args.args[1]
        assert fields["status"] == OrderStatus.COMPLETED
        assert order.delivered_at is not None
        assert fields["delivered_at"] == order.delivered_at

    def test_publishes_status_changed(self, service, repo, bus, stored):
        repo.fetch_by_id.return_value = stored

        service.update_status("order-1", OrderStatus.READY)

        event = bus.publish.call_args.args[0]
        assert isinstance(event, OrderStatusChanged)
        assert (event.old_status, event.new_status) == ("pending", "ready")

    def test_cancellation_also_publishes_order_cancelled(self, service, repo, bus, stored):
        repo.fetch_by_id.return_value = stored

        service.cancel_order("order-1", "Customer request")

        published = [call.args[0] for call in bus.publish.call_args_list]
        assert [type(e) for e in published] == [OrderStatusChanged, OrderCancelled]
        assert repo.append_history.call_args.args[1].note == "Customer request"

    def test_missing_order_propagates(self, service, repo):
        repo.fetch_by_id.side_effect = OrderNotFound("Order x not found.")
        with pytest.raises(OrderNotFound):
            service.update_status("x", OrderStatus.READY)
        repo.append_history.assert_not_called()

    def test_unknown_status_writes_nothing(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored
        with pytest.raises(InvalidOrderError):
            service.update_status("order-1", "shipped")
        repo.apply_update.assert_not_called()


class TestEditOrder:
    def test_applies_only_supplied_fields(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored

        service.edit_order("order-1", EditOrderDTO(notes="Deliver to dock B"))

        repo.apply_update.assert_called_once_with("order-1", {"notes": "Deliver to dock B"})

    def test_item_edit_sends_new_total(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored
        items = [OrderItem(fabric="Denim", quantity=Decimal("4"))]

        order = service.edit_order("order-1", EditOrderDTO(items=items))

        fields = repo.apply_update.call_args.args[1]
        assert fields["total_amount"] == Decimal("28")
        assert order.total_amount == Decimal("28")

    def test_no_changes_skips_gateway_write(self, service, repo, stored):
        repo.fetch_by_id.return_value = stored
        service.edit_order("order-1", EditOrderDTO())
        repo.apply_update.assert_not_called()


class TestQueries:
    @pytest.fixture()
    def orders(self):
        placed = [
            engine.create_order(
                name, [{"fabric": fabric, "color": "Teal", "quantity": "1"}], now=NOW + timedelta(days=i)
            )
            for i, (name, fabric) in enumerate(
                [("Ana Souza", "Cotton"), ("Bruno Lima", "Silk"), ("Ana Souza", "Velvet")]
            )
        ]
        engine.update_status(placed[1], OrderStatus.COMPLETED, now=NOW + timedelta(days=5))
        engine.update_status(placed[2], OrderStatus.COMPLETED, now=NOW + timedelta(days=9))
        return placed

    def test_list_passes_customer_scope_to_gateway(self, service, repo, orders):
        repo.fetch_all.return_value = orders
        service.list_orders(OrderQueryDTO(customer_name="Ana Souza"))
        repo.fetch_all.assert_called_once_with(customer_name="Ana Souza")

    def test_list_filters_status_and_sorts(self, service, repo, orders):
        repo.fetch_all.return_value = orders

        result = service.list_orders(
            OrderQueryDTO(status=OrderStatus.COMPLETED, ordering="total_amount")
        )

        assert result == [orders[1], orders[2]]

    def test_history_only_completed_and_by_delivery_date(self, service, repo, orders):
        repo.fetch_all.return_value = orders

        result = service.list_history(
            OrderQueryDTO(start_date=date(2024, 3, 8), ordering="-delivered_at")
        )

        assert result == [orders[2]]

    def test_history_search_matches_fabric(self, service, repo, orders):
        repo.fetch_all.return_value = orders
        result = service.list_history(OrderQueryDTO(search="velvet"))
        assert result == [orders[2]]

    def test_summary_uses_every_order(self, service, repo, orders):
        repo.fetch_all.return_value = orders
        summary = service.summary()
        assert summary.total_orders == 3
        assert summary.by_status["completed"] == 2

    def test_get_by_tracking_number_delegates(self, service, repo, stored):
        repo.fetch_by_tracking_number.return_value = stored
        assert service.get_by_tracking_number(stored.tracking_number) is stored

    def test_get_by_tracking_number_passes_customer_scope(self, service, repo, stored):
        repo.fetch_by_tracking_number.return_value = stored
        service.get_by_tracking_number(stored.tracking_number, customer_name="Ana Souza")
        repo.fetch_by_tracking_number.assert_called_once_with(
            stored.tracking_number, customer_name="Ana Souza"
        )

    def test_customer_summary_is_scoped(self, service, repo, orders):
        repo.fetch_all.return_value = [orders[0], orders[2]]

        summary = service.customer_summary(customer_name="Ana Souza")

        repo.fetch_all.assert_called_once_with(customer_name="Ana Souza")
        assert summary.total_orders == 2
        assert summary.completed_orders == 1
        assert summary.total_spent == Decimal("15")

    def test_delete_propagates_not_found(self, service, repo):
        repo.delete.side_effect = OrderNotFound("gone")
        with pytest.raises(OrderNotFound):
            service.delete_order("gone")
