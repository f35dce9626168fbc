"""The acting user as seen by the service layer.

Authentication is handled by DRF/SimpleJWT; services only need a display
name for audit entries and whether the user holds the administrative
override that lifts the status-transition restrictions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

OVERRIDE_TRANSITION_PERMISSION = "statuses.override_transition"


@dataclass(frozen=True)
class Actor:
    name: str
    privileged: bool = False

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        """Build an ``Actor`` from a Django (or token) user."""
        get_full_name = getattr(user, "get_full_name", None)
        name = (get_full_name() if callable(get_full_name) else "") or ""
        if not name.strip():
            name = user.get_username() if hasattr(user, "get_username") else str(user)
        has_perm = getattr(user, "has_perm", None)
        privileged = bool(has_perm and has_perm(OVERRIDE_TRANSITION_PERMISSION))
        return cls(name=name.strip(), privileged=privileged)
