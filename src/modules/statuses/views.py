"""Status API views.

Exposes ``StatusService`` via a DRF ViewSet. Reads need authentication;
writes additionally need the Django model permissions for ``Status``.
Domain exceptions are translated into HTTP status codes here.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.permissions import DjangoModelPermissions, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.statuses.dtos import CreateStatusDTO, UpdateStatusDTO
from modules.statuses.exceptions import StatusInUse, StatusNotFound
from modules.statuses.models import Status
from modules.statuses.repositories.django_repository import StatusDjangoRepository
from modules.statuses.services import StatusService


def _payload(dto_class: type, data: Any) -> Dict[str, Any]:
    """Keep only keys the DTO declares so ``exclude_unset`` stays meaningful."""
    return {key: data[key] for key in dto_class.model_fields if key in data}


def _validation_error(exc: PydanticValidationError) -> Response:
    return Response(
        {
            "detail": "Invalid status payload.",
            "errors": exc.errors(include_url=False, include_context=False),
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class StatusViewSet(GenericViewSet):
    """CRUD for workflow statuses (no pagination; the workflow is small)."""

    queryset = Status.objects.all()
    permission_classes = [IsAuthenticated, DjangoModelPermissions]
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = StatusService(repository=StatusDjangoRepository())

    def list(self, request: Request) -> Response:
        """GET /api/v1/statuses/"""
        statuses = self._service.list_statuses()
        return Response([s.model_dump(mode="json") for s in statuses])

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/statuses/{pk}/"""
        try:
            dto = self._service.get_status(str(pk))
        except StatusNotFound:
            return Response(
                {"detail": "Status not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(dto.model_dump(mode="json"))

    def create(self, request: Request) -> Response:
        """POST /api/v1/statuses/"""
        try:
            dto = CreateStatusDTO(**_payload(CreateStatusDTO, request.data))
        except PydanticValidationError as exc:
            return _validation_error(exc)

        try:
            created = self._service.create_status(dto)
        except StatusNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(created.model_dump(mode="json"), status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/statuses/{pk}/"""
        try:
            dto = UpdateStatusDTO(**_payload(UpdateStatusDTO, request.data))
        except PydanticValidationError as exc:
            return _validation_error(exc)

        if self._service_missing(pk):
            return Response(
                {"detail": "Status not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        try:
            updated = self._service.update_status(str(pk), dto)
        except StatusNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(updated.model_dump(mode="json"))

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/statuses/{pk}/"""
        try:
            self._service.delete_status(str(pk))
        except StatusNotFound:
            return Response(
                {"detail": "Status not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except StatusInUse as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _service_missing(self, pk: str | None) -> bool:
        try:
            self._service.get_status(str(pk))
        except StatusNotFound:
            return True
        return False
