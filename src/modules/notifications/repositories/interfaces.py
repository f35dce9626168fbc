"""Settings document repository interface.

The workflow only reads documents; the settings API writes them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ISettingsRepository(ABC):
    """Key/value access to integration settings documents."""

    @abstractmethod
    def get_document(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the JSON document stored under ``key``, or ``None``."""

    @abstractmethod
    def save_document(self, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the document stored under ``key``."""
