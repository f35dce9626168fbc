"""Client domain exceptions."""

from __future__ import annotations


class ClientNotFound(Exception):
    """The client referenced by a service order does not exist."""
