"""Inventory API views (staff only).

Exposes the ``InventoryService`` via HTTP using DRF ViewSets.
Domain exceptions are re-raised as DRF exceptions so the standard
error handler renders them; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import Conflict, from_pydantic
from modules.core.pagination import StandardResultsSetPagination
from modules.inventory.dtos import CreateInventoryItemDTO, UpdateInventoryItemDTO
from modules.inventory.exceptions import (
    InventoryItemAlreadyExists,
    InventoryItemNotFound,
)
from modules.inventory.filters import InventoryItemFilter
from modules.inventory.repositories import InventoryDjangoRepository
from modules.inventory.serializers import InventoryItemSerializer
from modules.inventory.services import InventoryService

WRITABLE_FIELDS = ("name", "category", "quantity", "unit", "description", "threshold")


class InventoryItemViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for inventory CRUD operations.

    Uses ``InventoryService`` with ``InventoryDjangoRepository`` (DIP).
    """

    permission_classes = [IsAuthenticated, IsAdminUser]
    filterset_class = InventoryItemFilter
    search_fields = ["name", "description", "category"]
    ordering_fields = ["name", "category", "quantity", "threshold", "updated_at"]
    ordering = ["category", "name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = InventoryItemSerializer
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = InventoryService(repository=InventoryDjangoRepository())

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def get_queryset(self):
        return self._service.list_items()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/inventory/{pk}/"""
        try:
            item = self._service.get_item(pk)
        except InventoryItemNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(InventoryItemSerializer(item).data)

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        """GET /api/v1/inventory/low-stock/"""
        items = self._service.low_stock_items()
        return Response(InventoryItemSerializer(items, many=True).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/inventory/"""
        data = request.data
        try:
            dto = CreateInventoryItemDTO(
                **{field: data[field] for field in WRITABLE_FIELDS if field in data}
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            item = self._service.create_item(dto)
        except InventoryItemAlreadyExists as exc:
            raise Conflict(str(exc)) from exc

        out = InventoryItemSerializer(item)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/inventory/{pk}/"""
        data = request.data
        try:
            dto = UpdateInventoryItemDTO(
                **{field: data[field] for field in WRITABLE_FIELDS if field in data}
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            item = self._service.update_item(pk, dto)
        except InventoryItemNotFound as exc:
            raise NotFound(str(exc)) from exc
        except InventoryItemAlreadyExists as exc:
            raise Conflict(str(exc)) from exc

        return Response(InventoryItemSerializer(item).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/inventory/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/inventory/{pk}/"""
        try:
            self._service.delete_item(pk)
        except InventoryItemNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(status=status.HTTP_204_NO_CONTENT)
