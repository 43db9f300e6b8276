"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and re-raised as DRF exceptions so the
standard error handler renders them; the view never swallows generic
exceptions.

Staff users manage every order.  Customers only see, create and cancel
orders placed under their own display name; anything else is a 404.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import from_pydantic
from modules.core.pagination import StandardResultsSetPagination
from modules.core.permissions import customer_scope
from modules.orders.constants import (
    DEFAULT_UNIT,
    DEFAULT_UNIT_PRICE,
    FABRIC_PRICING,
    OrderStatus,
)
from modules.orders.dtos import (
    CreateOrderDTO,
    EditOrderDTO,
    OrderQueryDTO,
    UpdateStatusDTO,
)
from modules.orders.entities import Order, OrderItem
from modules.orders.exceptions import InvalidOrderError, OrderNotFound
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    CustomerSummarySerializer,
    EditOrderSerializer,
    OrderListSerializer,
    OrderQuerySerializer,
    OrderSerializer,
    OrderTimelineSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService

STAFF_ONLY_ACTIONS = {"update", "partial_update", "destroy", "set_status"}


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with an injected ``OrderDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    serializer_class = OrderSerializer
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(order_repository=OrderDjangoRepository())

    def get_permissions(self):
        if self.action in STAFF_ONLY_ACTIONS:
            return [IsAuthenticated(), IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "history", "track", "summary"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Customers always order under their own name; staff must supply
        ``customer_name``.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        scope = customer_scope(request.user)
        try:
            dto = CreateOrderDTO(
                customer_name=scope if scope is not None else data.get("customer_name", ""),
                items=[OrderItem(**item) for item in data["items"]],
                notes=data.get("notes", ""),
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            order = self._service.create_order(dto)
        except InvalidOrderError as exc:
            raise ValidationError(str(exc), code="invalid_order") from exc

        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Query params: ``search``, ``start_date``, ``end_date``, ``period``,
        ``status``, ``customer``, ``ordering``, ``page``, ``page_size``.
        """
        query = self._build_query(request, default_ordering="-created_at")
        try:
            orders = self._service.list_orders(query)
        except InvalidOrderError as exc:
            raise ValidationError(str(exc)) from exc
        return self._paginated(orders)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._get_visible_order(request, pk)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def history(self, request: Request) -> Response:
        """GET /api/v1/orders/history/

        Completed orders only.  The date window applies to the delivery
        date and ``search`` also matches fabric and color.
        """
        query = self._build_query(request, default_ordering="-delivered_at")
        try:
            orders = self._service.list_history(query)
        except InvalidOrderError as exc:
            raise ValidationError(str(exc)) from exc
        return self._paginated(orders)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"track/(?P<tracking_number>[A-Za-z0-9]+)",
    )
    def track(self, request: Request, tracking_number: str | None = None) -> Response:
        """GET /api/v1/orders/track/{tracking_number}/"""
        try:
            order = self._service.get_by_tracking_number(
                tracking_number or "", customer_name=customer_scope(request.user)
            )
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(OrderTimelineSerializer(order).data)

    @action(detail=True, methods=["get"])
    def timeline(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/timeline/"""
        order = self._get_visible_order(request, pk)
        return Response(OrderTimelineSerializer(order).data)

    @action(detail=False, methods=["get"])
    def pricing(self, request: Request) -> Response:
        """GET /api/v1/orders/pricing/"""
        return Response(
            {
                "unit": DEFAULT_UNIT,
                "default_unit_price": str(DEFAULT_UNIT_PRICE),
                "fabrics": [
                    {"fabric": fabric, "unit_price": str(price)}
                    for fabric, price in FABRIC_PRICING.items()
                ],
            }
        )

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/orders/summary/

        Customer dashboard: active and completed counts, total spent, the
        next expected delivery and the monthly order trend.  Staff may
        pass ``customer`` to look at one customer; without it every order
        is counted.
        """
        scope = customer_scope(request.user)
        customer_name = scope if scope is not None else request.query_params.get("customer")
        summary = self._service.customer_summary(customer_name=customer_name or None)
        return Response(CustomerSummarySerializer(summary).data)

    # ------------------------------------------------------------------
    # Administrative edits (staff only)
    # ------------------------------------------------------------------

    def update(
        self, request: Request, pk: str | None = None, partial: bool = False
    ) -> Response:
        """PUT /api/v1/orders/{pk}/

        Replaces ``customer_name``, ``items``, ``notes`` and
        ``estimated_delivery``; all four are required.  Status changes go
        through ``/status/``.
        """
        serializer = EditOrderSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data: Dict[str, Any] = dict(serializer.validated_data)
        try:
            if "items" in data:
                data["items"] = [OrderItem(**item) for item in data["items"]]
            dto = EditOrderDTO(**data)
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            order = self._service.edit_order(pk, dto)
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InvalidOrderError as exc:
            raise ValidationError(str(exc), code="invalid_order") from exc

        return Response(OrderSerializer(order).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Applies only the supplied editable fields.
        """
        return self.update(request, pk, partial=True)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        try:
            self._service.delete_order(pk)
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/status/

        Every call is recorded, including repeats and backward moves.
        """
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateStatusDTO(**serializer.validated_data)

        try:
            order = self._service.update_status(pk, dto.status, dto.note)
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InvalidOrderError as exc:
            raise ValidationError(str(exc), code="invalid_status") from exc

        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Customers may only cancel orders that are still in progress;
        staff corrections on finished orders go through ``/status/``.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = serializer.validated_data.get("note") or None

        order = self._get_visible_order(request, pk)
        if customer_scope(request.user) is not None and order.is_terminal:
            raise ValidationError(
                f"Order is already {OrderStatus(order.status).value}.",
                code="invalid_status",
            )
        try:
            order = self._service.cancel_order(pk, note)
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc

        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_visible_order(self, request: Request, pk: str | None) -> Order:
        try:
            order = self._service.get_order(pk)
        except OrderNotFound as exc:
            raise NotFound(str(exc)) from exc
        self._check_visible(request, order)
        return order

    def _check_visible(self, request: Request, order: Order) -> None:
        scope = customer_scope(request.user)
        if scope is not None and order.customer_name != scope:
            raise NotFound("Order not found.")

    def _build_query(self, request: Request, default_ordering: str) -> OrderQueryDTO:
        params = OrderQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        scope = customer_scope(request.user)
        try:
            return OrderQueryDTO(
                search=data.get("search", ""),
                start_date=data.get("start_date"),
                end_date=data.get("end_date"),
                period=data.get("period"),
                status=data.get("status"),
                customer_name=scope if scope is not None else data.get("customer"),
                ordering=data.get("ordering", default_ordering),
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

    def _paginated(self, orders: List[Order]) -> Response:
        page = self.paginate_queryset(orders)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)
