"""Django ORM implementation of the Status repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.statuses.models import Status
from modules.statuses.repositories.interfaces import IStatusRepository

logger = structlog.get_logger(__name__)

_ADJACENCY = ("allowed_next_statuses", "allowed_previous_statuses")


class StatusDjangoRepository(IStatusRepository):
    """Concrete Status repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Status]:
        """Returns ``None`` for non-existent or malformed IDs."""
        try:
            return Status.objects.prefetch_related(*_ADJACENCY).filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Status]:
        queryset = Status.objects.prefetch_related(*_ADJACENCY).order_by(
            "order", "name"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def existing_ids(self, ids: List[str]) -> List[str]:
        try:
            found = Status.objects.filter(id__in=ids).values_list("id", flat=True)
            return [str(i) for i in found]
        except (ValueError, ValidationError):
            return []

    @transaction.atomic
    def save(
        self,
        entity: Status,
        next_ids: Optional[List[str]] = None,
        previous_ids: Optional[List[str]] = None,
    ) -> Status:
        entity.full_clean()
        entity.save()
        if next_ids is not None:
            entity.allowed_next_statuses.set(next_ids)
        if previous_ids is not None:
            entity.allowed_previous_statuses.set(previous_ids)
        logger.info("status.saved", status_id=str(entity.id))
        return self.get_by_id(str(entity.id)) or entity

    def is_referenced(self, id: str) -> bool:
        from modules.orders.models import ServiceOrder

        return ServiceOrder.objects.filter(status_id=id).exists()

    @transaction.atomic
    def delete(self, id: str) -> bool:
        status = self.get_by_id(id)
        if not status:
            return False
        status.delete()
        logger.info("status.deleted", status_id=str(id))
        return True
