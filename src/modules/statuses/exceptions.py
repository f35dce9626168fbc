"""Status workflow exceptions.

Raised by the status registry, the transition validator and the status
administration service. Views translate them into HTTP responses.
"""

from __future__ import annotations


class StatusNotFound(Exception):
    """A referenced status id does not exist."""


class NoInitialStatusConfigured(Exception):
    """No status is flagged ``is_initial``; orders cannot be created."""


class InvalidStatusTransition(Exception):
    """The target status is not reachable from the current one for this actor."""

    def __init__(self, message: str, current_status_id: str = "") -> None:
        super().__init__(message)
        self.current_status_id = current_status_id


class StatusInUse(Exception):
    """A status cannot be deleted while service orders reference it."""
