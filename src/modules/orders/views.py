"""Service-order API views.

Exposes ``ServiceOrderService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
Notification failures are not errors here: they come back inside the
200 transition envelope under ``notifications``.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.clients.exceptions import ClientNotFound
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.actors import Actor
from modules.core.pagination import StandardResultsSetPagination
from modules.notifications.pipeline import NotificationPipeline
from modules.notifications.repositories.django_repository import (
    SettingsDjangoRepository,
)
from modules.orders.dtos import (
    CollaboratorDTO,
    CreateServiceOrderDTO,
    EquipmentDTO,
    UpdateServiceOrderDetailsDTO,
)
from modules.orders.exceptions import (
    InvalidInitialStatus,
    PendingServiceConfirmation,
    ServiceOrderNotFound,
    TechnicalSolutionRequired,
)
from modules.orders.filters import ServiceOrderFilter
from modules.orders.models import ServiceOrder
from modules.orders.repositories.django_repository import ServiceOrderDjangoRepository
from modules.orders.serializers import (
    CreateServiceOrderSerializer,
    TransitionSerializer,
    UpdateServiceOrderDetailsSerializer,
)
from modules.orders.services import ServiceOrderService
from modules.statuses.exceptions import (
    InvalidStatusTransition,
    NoInitialStatusConfigured,
    StatusNotFound,
)
from modules.statuses.repositories.django_repository import StatusDjangoRepository
from modules.statuses.services import StatusRegistry

ORDER_NOT_FOUND = {"detail": "Service order not found."}


def build_service_order_service() -> ServiceOrderService:
    return ServiceOrderService(
        order_repository=ServiceOrderDjangoRepository(),
        client_repository=ClientDjangoRepository(),
        status_registry=StatusRegistry(StatusDjangoRepository()),
        notification_pipeline=NotificationPipeline.default(SettingsDjangoRepository()),
    )


class ServiceOrderViewSet(GenericViewSet):
    """ViewSet for service-order operations.

    Does **not** extend ``ModelViewSet``; all writes go through the
    service/repository layer.
    """

    queryset = ServiceOrder.objects.none()
    filterset_class = ServiceOrderFilter
    search_fields = ["order_number", "client__name", "reported_problem", "analyst"]
    ordering_fields = ["created_at", "updated_at", "order_number"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_service_order_service()

    def get_queryset(self):
        return ServiceOrderDjangoRepository().list()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/service-orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        rows = self._service.list_orders(page)
        return paginator.get_paginated_response(
            [row.model_dump(mode="json") for row in rows]
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/service-orders/{pk}/"""
        try:
            order = self._service.get_order(str(pk))
        except ServiceOrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(order.model_dump(mode="json"))

    @action(detail=False, methods=["get"], url_path="ready-for-pickup")
    def ready_for_pickup(self, request: Request) -> Response:
        """GET /api/v1/service-orders/ready-for-pickup/"""
        rows = self._service.ready_for_pickup()
        return Response([row.model_dump(mode="json") for row in rows])

    @action(detail=True, methods=["get"])
    def transitions(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/service-orders/{pk}/transitions/"""
        try:
            candidates = self._service.available_transitions(
                str(pk), Actor.from_user(request.user)
            )
        except ServiceOrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response([c.model_dump(mode="json") for c in candidates])

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/service-orders/"""
        serializer = CreateServiceOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        dto = CreateServiceOrderDTO(
            client_id=data["client_id"],
            status_id=data.get("status_id") or None,
            collaborator=CollaboratorDTO(**data["collaborator"]),
            equipment=EquipmentDTO(**data["equipment"]),
            reported_problem=data["reported_problem"],
            attachments=data.get("attachments", []),
        )

        try:
            order = self._service.create_order(dto, Actor.from_user(request.user))
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except InvalidInitialStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except NoInitialStatusConfigured as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        return Response(order.model_dump(mode="json"), status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # Detail edit / Delete
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/service-orders/{pk}/

        Edits details only; status changes go through ``transition``.
        """
        serializer = UpdateServiceOrderDetailsSerializer(
            data=request.data, partial=True
        )
        serializer.is_valid(raise_exception=True)
        dto = UpdateServiceOrderDetailsDTO(**serializer.validated_data)

        try:
            order = self._service.update_order_details(
                str(pk), dto, Actor.from_user(request.user)
            )
        except ServiceOrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except ClientNotFound:
            return Response(
                {"detail": "Client not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(order.model_dump(mode="json"))

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/service-orders/{pk}/ (soft delete)"""
        try:
            self._service.delete_order(str(pk))
        except ServiceOrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Status transition
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def transition(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/service-orders/{pk}/transition/"""
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = self._service.update_order(
                order_id=str(pk),
                new_status_id=data["status_id"],
                actor=Actor.from_user(request.user),
                technical_solution=data.get("technical_solution"),
                observation=data.get("observation"),
                attachments=data.get("attachments"),
                confirmed_service_ids=data.get("confirmed_service_ids"),
            )
        except ServiceOrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except StatusNotFound:
            return Response(
                {"detail": "Status not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except InvalidStatusTransition as exc:
            return Response(
                {"detail": str(exc), "current_status_id": exc.current_status_id},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except TechnicalSolutionRequired as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except PendingServiceConfirmation as exc:
            return Response(
                {
                    "detail": str(exc),
                    "pending_service_ids": exc.pending_service_ids,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(result.model_dump(mode="json"))
