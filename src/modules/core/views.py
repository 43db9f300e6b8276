import time
from typing import Any, Dict

import structlog
from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.inventory.models import InventoryItem
from modules.inventory.repositories import InventoryDjangoRepository
from modules.inventory.serializers import InventoryItemSerializer
from modules.inventory.services import InventoryService
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.staff.models import StaffMember
from modules.staff.repositories import StaffDjangoRepository
from modules.staff.services import StaffService

logger = structlog.get_logger(__name__)


def _record_counts() -> Dict[str, int]:
    return {
        "orders": Order.objects.count(),
        "inventory": InventoryItem.objects.count(),
        "staff": StaffMember.objects.count(),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness probe: database, cache and per-collection record counts."""
    services: Dict[str, Dict[str, Any]] = {}
    counts: Dict[str, int] = {}
    overall_healthy = True

    # Database
    try:
        start = time.monotonic()
        conn = connections["default"]
        conn.ensure_connection()
        with conn.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        counts = _record_counts()
        services["database"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except DatabaseError:
        services["database"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check.db_failure", exc_info=True)

    # Cache (Redis)
    try:
        start = time.monotonic()
        cache.set("_health_check", "ok", 10)
        if cache.get("_health_check") != "ok":
            raise ConnectionError("Cache read failed")
        services["cache"] = {
            "status": "up",
            "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        }
    except Exception:
        # Backend-specific errors (redis.ConnectionError, ...) vary by cache.
        services["cache"] = {"status": "down"}
        overall_healthy = False
        logger.error("health_check.cache_failure", exc_info=True)

    status_label = "healthy" if overall_healthy else "unhealthy"
    logger.info("health_check.completed", status=status_label)

    return JsonResponse(
        {
            "status": status_label,
            "timestamp": timezone.now().isoformat(),
            "services": services,
            "counts": counts,
        },
        status=200 if overall_healthy else 503,
    )


class DashboardView(APIView):
    """Admin summary of order flow, low stock and active staff.

    * Anonymous -> 401
    * Customer  -> 403
    * Staff     -> 200
    """

    permission_classes = [IsAuthenticated, IsAdminUser]

    def get(self, request: Request) -> Response:
        summary = OrderService(order_repository=OrderDjangoRepository()).summary()
        low_stock = InventoryService(
            repository=InventoryDjangoRepository()
        ).low_stock_items()
        active_staff = StaffService(repository=StaffDjangoRepository()).count_active()

        return Response(
            {
                "orders": summary.model_dump(),
                "inventory": {
                    "low_stock_count": len(low_stock),
                    "low_stock_items": InventoryItemSerializer(
                        low_stock, many=True
                    ).data,
                },
                "staff": {"active_count": active_staff},
            }
        )
