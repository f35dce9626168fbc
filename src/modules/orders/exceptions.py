"""Service-order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class ServiceOrderNotFound(Exception):
    """The requested service order does not exist or has been soft-deleted."""


class InvalidInitialStatus(Exception):
    """An order may only be created in a status flagged ``is_initial``."""


class TechnicalSolutionRequired(Exception):
    """A pickup status needs a non-blank technical solution."""


class PendingServiceConfirmation(Exception):
    """Notifying statuses need every contracted service confirmed."""

    def __init__(self, message: str, pending_service_ids: list | None = None) -> None:
        super().__init__(message)
        self.pending_service_ids = pending_service_ids or []


class AuditLogImmutable(Exception):
    """Status and edit logs are append-only."""
