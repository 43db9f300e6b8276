from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.orders import engine
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from shared.infrastructure.bus import InMemoryEventBus

User = get_user_model()

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 15, 123456, tzinfo=dt_timezone.utc)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="manager", password="testpass123", is_staff=True
    )


@pytest.fixture()
def customer_user():
    return User.objects.create_user(
        username="ana",
        password="testpass123",
        first_name="Ana",
        last_name="Souza",
    )


@pytest.fixture()
def staff_client(staff_user):
    """APIClient force-authenticated as a staff (admin) user."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture()
def customer_client(customer_user):
    """APIClient force-authenticated as the customer "Ana Souza"."""
    client = APIClient()
    client.force_authenticate(user=customer_user)
    return client


@pytest.fixture()
def event_bus():
    return InMemoryEventBus()


@pytest.fixture()
def order_service(event_bus):
    return OrderService(order_repository=OrderDjangoRepository(), event_bus=event_bus)


@pytest.fixture()
def cotton_silk_items():
    return [
        {"fabric": "Cotton", "color": "Blue", "quantity": Decimal("50"), "unit": "meters"},
        {"fabric": "Silk", "color": "Gold", "quantity": Decimal("10"), "unit": "meters"},
    ]


@pytest.fixture()
def new_order(cotton_silk_items):
    """An unsaved pending order built by the engine at ``FIXED_NOW``."""
    return engine.create_order("Ana Souza", cotton_silk_items, "Rush job", now=FIXED_NOW)
