"""Django ORM implementation of the Client repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.clients.models import Client
from modules.clients.repositories.interfaces import IClientRepository

logger = structlog.get_logger(__name__)


class ClientDjangoRepository(IClientRepository):
    """Concrete Client repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Client]:
        """Retrieve a client with its contracted services prefetched.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return (
                Client.objects.prefetch_related("contracted_services")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Client]:
        queryset = Client.objects.prefetch_related("contracted_services")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def delete(self, id: str) -> bool:
        client = self.get_by_id(id)
        if not client:
            return False
        client.delete()
        logger.info("client.deleted", client_id=str(id))
        return True
