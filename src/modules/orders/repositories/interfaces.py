"""Service-order repository interface.

Extends ``IRepository[ServiceOrder]`` with the operations the order
engine needs: row locking, insert-only audit appends and the atomic
order-number counter.

The Service Layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import (
        ServiceOrder,
        ServiceOrderEditLog,
        ServiceOrderLog,
    )


class IServiceOrderRepository(IRepository["ServiceOrder"]):
    """Repository contract for the ServiceOrder aggregate."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[ServiceOrder]:
        """Retrieve a live order with client, logs and edit logs loaded."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[ServiceOrder]:
        """Retrieve a live order holding a row lock for the transaction."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Live orders, newest first, with the client joined."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> ServiceOrder:
        """Insert a new order from ``data`` (model field names)."""

    @abstractmethod
    def save(self, entity: ServiceOrder, update_fields: List[str]) -> ServiceOrder:
        """Persist the given fields of an existing order."""

    @abstractmethod
    def next_order_number(self) -> str:
        """Draw the next ``OS-###`` number from the counter."""

    @abstractmethod
    def append_log(
        self,
        order: ServiceOrder,
        from_status: str,
        to_status: str,
        responsible: str,
        observation: str = "",
    ) -> ServiceOrderLog:
        """Append a status log entry."""

    @abstractmethod
    def append_edit_log(
        self,
        order: ServiceOrder,
        responsible: str,
        observation: str,
        changes: List[Dict[str, Any]],
    ) -> ServiceOrderEditLog:
        """Append a detail-edit log entry."""
