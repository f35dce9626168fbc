"""Status DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``StatusDTO``: a resolved status, adjacency exposed as id lists.
- ``UNKNOWN_STATUS``: sentinel substituted by consumers for a dangling
  ``status_id`` (the repository never fabricates it).
- ``CreateStatusDTO`` / ``UpdateStatusDTO``: administration input.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from modules.statuses.models import Status

UNKNOWN_STATUS_ID = "unknown"

_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not _COLOR_RE.match(value):
        raise ValueError("Color must be a hex value like #RRGGBB.")
    return value


def _check_order(value: Optional[int]) -> Optional[int]:
    if value is not None and value < 1:
        raise ValueError("Order must be a positive integer.")
    return value


def _check_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name must not be blank.")
    return value


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class StatusDTO(BaseModel):
    """Immutable view of a workflow status."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    order: int
    color: str = "#808080"
    icon: str = ""
    is_initial: bool = False
    is_final: bool = False
    is_pickup_status: bool = False
    triggers_email: bool = False
    triggers_whatsapp: bool = False
    email_subject: str = ""
    email_body: str = ""
    whatsapp_body: str = ""
    allowed_next_statuses: List[str] = []
    allowed_previous_statuses: List[str] = []

    @property
    def is_unknown(self) -> bool:
        return self.id == UNKNOWN_STATUS_ID

    @property
    def triggers_notification(self) -> bool:
        return self.triggers_email or self.triggers_whatsapp

    @classmethod
    def from_entity(cls, status: Status) -> StatusDTO:
        """Build from a model instance (adjacency should be prefetched)."""
        return cls(
            id=str(status.id),
            name=status.name,
            order=status.order,
            color=status.color,
            icon=status.icon,
            is_initial=status.is_initial,
            is_final=status.is_final,
            is_pickup_status=status.is_pickup_status,
            triggers_email=status.triggers_email,
            triggers_whatsapp=status.triggers_whatsapp,
            email_subject=status.email_subject,
            email_body=status.email_body,
            whatsapp_body=status.whatsapp_body,
            allowed_next_statuses=[
                str(s.id) for s in status.allowed_next_statuses.all()
            ],
            allowed_previous_statuses=[
                str(s.id) for s in status.allowed_previous_statuses.all()
            ],
        )


UNKNOWN_STATUS = StatusDTO(
    id=UNKNOWN_STATUS_ID,
    name="Desconhecido",
    order=999,
    color="#808080",
    icon="help-circle",
)


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateStatusDTO(BaseModel):
    """Immutable DTO for status creation requests."""

    model_config = ConfigDict(frozen=True)

    name: str
    order: int = 1
    color: str = "#808080"
    icon: str = ""
    is_initial: bool = False
    is_final: bool = False
    is_pickup_status: bool = False
    triggers_email: bool = False
    triggers_whatsapp: bool = False
    email_subject: str = ""
    email_body: str = ""
    whatsapp_body: str = ""
    allowed_next_statuses: List[str] = []
    allowed_previous_statuses: List[str] = []

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("color")
    @classmethod
    def color_must_be_hex(cls, v: str) -> str:
        return _check_color(v)

    @field_validator("order")
    @classmethod
    def order_must_be_positive(cls, v: int) -> int:
        return _check_order(v)


class UpdateStatusDTO(BaseModel):
    """Partial update; only fields explicitly sent are applied.

    The service reads ``model_dump(exclude_unset=True)``.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    order: Optional[int] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_initial: Optional[bool] = None
    is_final: Optional[bool] = None
    is_pickup_status: Optional[bool] = None
    triggers_email: Optional[bool] = None
    triggers_whatsapp: Optional[bool] = None
    email_subject: Optional[str] = None
    email_body: Optional[str] = None
    whatsapp_body: Optional[str] = None
    allowed_next_statuses: Optional[List[str]] = None
    allowed_previous_statuses: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v)

    @field_validator("color")
    @classmethod
    def color_must_be_hex(cls, v: Optional[str]) -> Optional[str]:
        return _check_color(v)

    @field_validator("order")
    @classmethod
    def order_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        return _check_order(v)
