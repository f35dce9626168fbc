"""Django ORM implementation of the ServiceOrder repository.

Concurrency control uses ``select_for_update()``: the engine locks the
order row for the whole validate-and-write transaction, and the order
number counter row is locked while it is incremented.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.orders.constants import ORDER_NUMBER_SEQUENCE, format_order_number
from modules.orders.models import (
    OrderNumberSequence,
    ServiceOrder,
    ServiceOrderEditLog,
    ServiceOrderLog,
)
from modules.orders.repositories.interfaces import IServiceOrderRepository

logger = structlog.get_logger(__name__)


class ServiceOrderDjangoRepository(IServiceOrderRepository):
    """Concrete ServiceOrder repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[ServiceOrder]:
        """Returns ``None`` for non-existent, soft-deleted or invalid IDs."""
        try:
            return (
                ServiceOrder.objects.alive()
                .select_related("client")
                .prefetch_related("logs", "edit_logs")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[ServiceOrder]:
        """Lock only the order row; the nullable client join stays lazy."""
        try:
            return (
                ServiceOrder.objects.alive()
                .select_for_update()
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        queryset = ServiceOrder.objects.alive().select_related("client")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def next_order_number(self) -> str:
        OrderNumberSequence.objects.get_or_create(name=ORDER_NUMBER_SEQUENCE)
        sequence = OrderNumberSequence.objects.select_for_update().get(
            name=ORDER_NUMBER_SEQUENCE
        )
        sequence.last_value += 1
        sequence.save(update_fields=["last_value"])
        return format_order_number(sequence.last_value)

    def create(self, data: Dict[str, Any]) -> ServiceOrder:
        order = ServiceOrder.objects.create(**data)
        logger.info(
            "service_order.inserted",
            order_id=str(order.id),
            order_number=order.order_number,
        )
        return order

    def save(self, entity: ServiceOrder, update_fields: List[str]) -> ServiceOrder:
        entity.save(update_fields=update_fields)
        return entity

    def append_log(
        self,
        order: ServiceOrder,
        from_status: str,
        to_status: str,
        responsible: str,
        observation: str = "",
    ) -> ServiceOrderLog:
        return ServiceOrderLog.objects.create(
            order=order,
            from_status=from_status,
            to_status=to_status,
            responsible=responsible,
            observation=observation or "",
        )

    def append_edit_log(
        self,
        order: ServiceOrder,
        responsible: str,
        observation: str,
        changes: List[Dict[str, Any]],
    ) -> ServiceOrderEditLog:
        return ServiceOrderEditLog.objects.create(
            order=order,
            responsible=responsible,
            observation=observation,
            changes=changes,
        )

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete an order by ID."""
        order = self.get_for_update(id)
        if not order:
            return False
        order.delete()
        logger.info("service_order.soft_deleted", order_id=str(id))
        return True
