"""Client repository interface.

The service-order workflow only reads clients: when an order is created,
when its client is changed and when a notification needs the recipient.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.clients.models import Client


class IClientRepository(IRepository["Client"]):
    """Repository contract for clients (read-side for the workflow)."""
