"""Integration tests for GET /api/v1/dashboard/."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.inventory.models import InventoryCategory, InventoryItem
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.entities import OrderItem
from modules.staff.models import Department, StaffMember, StaffStatus

pytestmark = pytest.mark.integration

URL = "/api/v1/dashboard/"


@pytest.fixture()
def populated(order_service):
    items = [OrderItem(fabric="Cotton", quantity=Decimal("1"))]
    first = order_service.create_order(CreateOrderDTO(customer_name="Ana Souza", items=items))
    second = order_service.create_order(CreateOrderDTO(customer_name="Bruno Lima", items=items))
    order_service.update_status(second.id, OrderStatus.COMPLETED)

    InventoryItem.objects.create(
        name="Indigo Paste", category=InventoryCategory.DYE, quantity=Decimal("5"),
        unit="kg", threshold=Decimal("20"),
    )
    InventoryItem.objects.create(
        name="Soda Ash", category=InventoryCategory.CHEMICAL, quantity=Decimal("300"),
        unit="kg", threshold=Decimal("50"),
    )
    StaffMember.objects.create(
        name="Marta", position="Supervisor", department=Department.PRODUCTION,
        email="marta@dyehouse.example.com",
    )
    StaffMember.objects.create(
        name="Igor", position="Dispatcher", department=Department.LOGISTICS,
        email="igor@dyehouse.example.com", status=StaffStatus.TERMINATED,
    )
    return first, second


def test_summary_counts(staff_client, populated):
    response = staff_client.get(URL)

    assert response.status_code == 200
    orders = response.data["orders"]
    assert orders["total_orders"] == 2
    assert orders["active_orders"] == 1
    assert orders["by_status"]["completed"] == 1
    assert orders["by_status"]["pending"] == 1
    assert sum(orders["by_month"].values()) == 2

    assert response.data["inventory"]["low_stock_count"] == 1
    assert response.data["inventory"]["low_stock_items"][0]["name"] == "Indigo Paste"
    assert response.data["staff"] == {"active_count": 1}


def test_empty_dashboard(staff_client):
    response = staff_client.get(URL)
    assert response.data["orders"]["total_orders"] == 0
    assert response.data["inventory"]["low_stock_count"] == 0


def test_customer_forbidden(customer_client):
    assert customer_client.get(URL).status_code == 403


def test_anonymous_unauthorized(api_client):
    assert api_client.get(URL).status_code == 401
