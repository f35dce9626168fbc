"""Status repository interface.

Lookups return ``None`` for unknown ids; substituting the "unknown"
sentinel is the caller's decision.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.statuses.models import Status


class IStatusRepository(IRepository["Status"]):
    """Repository contract for workflow statuses."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Status]:
        """Retrieve a status with its adjacency prefetched."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Status]:
        """List statuses ordered by ascending ``order``."""

    @abstractmethod
    def existing_ids(self, ids: List[str]) -> List[str]:
        """Return the subset of ``ids`` that exist."""

    @abstractmethod
    def save(
        self,
        entity: Status,
        next_ids: Optional[List[str]] = None,
        previous_ids: Optional[List[str]] = None,
    ) -> Status:
        """Persist a status; replace adjacency when ids are given."""

    @abstractmethod
    def is_referenced(self, id: str) -> bool:
        """Whether any service order currently points at this status."""
