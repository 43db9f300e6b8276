"""Staff API views (staff only).

Exposes the ``StaffService`` via HTTP using DRF ViewSets.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import Conflict, from_pydantic
from modules.core.pagination import StandardResultsSetPagination
from modules.staff.dtos import CreateStaffMemberDTO, UpdateStaffMemberDTO
from modules.staff.exceptions import StaffMemberAlreadyExists, StaffMemberNotFound
from modules.staff.filters import StaffMemberFilter
from modules.staff.repositories import StaffDjangoRepository
from modules.staff.serializers import StaffMemberSerializer
from modules.staff.services import StaffService

WRITABLE_FIELDS = (
    "name",
    "position",
    "department",
    "email",
    "phone",
    "join_date",
    "status",
)


class StaffMemberViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for staff CRUD operations.

    Uses ``StaffService`` with ``StaffDjangoRepository`` (DIP).
    """

    permission_classes = [IsAuthenticated, IsAdminUser]
    filterset_class = StaffMemberFilter
    search_fields = ["name", "email", "position"]
    ordering_fields = ["name", "join_date", "department"]
    ordering = ["name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = StaffMemberSerializer
    pagination_class = StandardResultsSetPagination

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = StaffService(repository=StaffDjangoRepository())

    def get_queryset(self):
        return self._service.list_members()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/staff/{pk}/"""
        try:
            member = self._service.get_member(pk)
        except StaffMemberNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(StaffMemberSerializer(member).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/staff/"""
        data = request.data
        try:
            dto = CreateStaffMemberDTO(
                **{field: data[field] for field in WRITABLE_FIELDS if field in data}
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            member = self._service.create_member(dto)
        except StaffMemberAlreadyExists as exc:
            raise Conflict(str(exc)) from exc

        out = StaffMemberSerializer(member)
        return Response(out.data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/staff/{pk}/"""
        data = request.data
        try:
            dto = UpdateStaffMemberDTO(
                **{field: data[field] for field in WRITABLE_FIELDS if field in data}
            )
        except PydanticValidationError as exc:
            raise from_pydantic(exc) from exc

        try:
            member = self._service.update_member(pk, dto)
        except StaffMemberNotFound as exc:
            raise NotFound(str(exc)) from exc
        except StaffMemberAlreadyExists as exc:
            raise Conflict(str(exc)) from exc

        return Response(StaffMemberSerializer(member).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/staff/{pk}/"""
        try:
            self._service.delete_member(pk)
        except StaffMemberNotFound as exc:
            raise NotFound(str(exc)) from exc
        return Response(status=status.HTTP_204_NO_CONTENT)
