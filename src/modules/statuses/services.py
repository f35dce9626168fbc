"""Status service layer.

``StatusRegistry`` is the read side the order engine depends on: ordered
listing, optional lookup, initial status and the transition graph.
``StatusService`` is the administration side (create / update / delete).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

import structlog
from django.db import transaction

from modules.statuses.dtos import StatusDTO
from modules.statuses.exceptions import (
    NoInitialStatusConfigured,
    StatusInUse,
    StatusNotFound,
)
from modules.statuses.models import Status
from modules.statuses.transitions import TransitionGraph

if TYPE_CHECKING:
    from modules.statuses.dtos import CreateStatusDTO, UpdateStatusDTO
    from modules.statuses.repositories.interfaces import IStatusRepository

logger = structlog.get_logger(__name__)

_ADJACENCY_FIELDS = ("allowed_next_statuses", "allowed_previous_statuses")


class StatusRegistry:
    """Read access to the configured workflow.

    Receives an ``IStatusRepository`` via constructor injection.
    """

    def __init__(self, repository: IStatusRepository) -> None:
        self._repo = repository

    def list_statuses(self) -> List[StatusDTO]:
        """All statuses, ascending ``order``."""
        statuses = [StatusDTO.from_entity(s) for s in self._repo.list()]
        return sorted(statuses, key=lambda s: (s.order, s.name))

    def get_status_by_id(self, status_id: str) -> Optional[StatusDTO]:
        if not status_id:
            return None
        status = self._repo.get_by_id(str(status_id))
        return StatusDTO.from_entity(status) if status else None

    def status_map(self) -> Dict[str, StatusDTO]:
        return {s.id: s for s in self.list_statuses()}

    def get_initial_status(self) -> StatusDTO:
        """The lowest-ordered status flagged ``is_initial``.

        Raises:
            NoInitialStatusConfigured: no status is flagged initial.
        """
        initial = [s for s in self.list_statuses() if s.is_initial]
        if not initial:
            logger.error("status.no_initial_configured")
            raise NoInitialStatusConfigured("No initial status is configured.")
        return initial[0]

    def build_graph(self) -> TransitionGraph:
        return TransitionGraph(self.list_statuses())


class StatusService:
    """Application service for status administration."""

    def __init__(self, repository: IStatusRepository) -> None:
        self._repo = repository

    def _validate_adjacency(self, ids: Optional[List[str]]) -> Optional[List[str]]:
        if ids is None:
            return None
        unique = list(dict.fromkeys(str(i) for i in ids))
        found = set(self._repo.existing_ids(unique))
        missing = [i for i in unique if i not in found]
        if missing:
            raise StatusNotFound(f"Status {missing[0]} not found.")
        return unique

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_status(self, dto: CreateStatusDTO) -> StatusDTO:
        """Create a status and its adjacency.

        Raises:
            StatusNotFound: an adjacency id does not exist.
        """
        next_ids = self._validate_adjacency(dto.allowed_next_statuses)
        previous_ids = self._validate_adjacency(dto.allowed_previous_statuses)

        status = Status(**dto.model_dump(exclude=set(_ADJACENCY_FIELDS)))
        status = self._repo.save(status, next_ids=next_ids, previous_ids=previous_ids)
        logger.info("status.created", status_id=str(status.id), name=status.name)
        return StatusDTO.from_entity(status)

    @transaction.atomic
    def update_status(self, status_id: str, dto: UpdateStatusDTO) -> StatusDTO:
        """Apply only the fields present in ``dto``.

        Raises:
            StatusNotFound: the status or an adjacency id does not exist.
        """
        status = self._repo.get_by_id(status_id)
        if not status:
            raise StatusNotFound(f"Status {status_id} not found.")

        changes = dto.model_dump(exclude_unset=True)
        next_ids = self._validate_adjacency(changes.pop("allowed_next_statuses", None))
        previous_ids = self._validate_adjacency(
            changes.pop("allowed_previous_statuses", None)
        )
        for field, value in changes.items():
            if value is not None:
                setattr(status, field, value)

        status = self._repo.save(status, next_ids=next_ids, previous_ids=previous_ids)
        logger.info(
            "status.updated", status_id=str(status_id), fields=sorted(changes)
        )
        return StatusDTO.from_entity(status)

    @transaction.atomic
    def delete_status(self, status_id: str) -> None:
        """Raises ``StatusNotFound`` or ``StatusInUse``."""
        if not self._repo.get_by_id(status_id):
            raise StatusNotFound(f"Status {status_id} not found.")
        if self._repo.is_referenced(status_id):
            logger.warning("status.delete_refused", status_id=str(status_id))
            raise StatusInUse(f"Status {status_id} is used by service orders.")
        self._repo.delete(status_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_statuses(self) -> List[StatusDTO]:
        return [StatusDTO.from_entity(s) for s in self._repo.list()]

    def get_status(self, status_id: str) -> StatusDTO:
        status = self._repo.get_by_id(status_id)
        if not status:
            raise StatusNotFound(f"Status {status_id} not found.")
        return StatusDTO.from_entity(status)
