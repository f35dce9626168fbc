"""Service-order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

Input:
- ``CreateServiceOrderDTO``: new order (collaborator, equipment, problem).
- ``UpdateServiceOrderDetailsDTO``: partial detail edit; only fields that
  were sent are compared and audited (``model_dump(exclude_unset=True)``).

Output:
- ``ServiceOrderDTO``: order enriched with resolved status, client name and
  both audit trails.
- ``ServiceOrderSummaryDTO``: list/dashboard rows.
- ``UpdateServiceOrderResult``: transition envelope with per-channel
  notification outcomes.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.core.phones import sanitize_phone
from modules.notifications.dtos import NotificationOutcome
from modules.statuses.dtos import StatusDTO

if TYPE_CHECKING:
    from modules.orders.models import ServiceOrder, ServiceOrderEditLog, ServiceOrderLog


def _strip_required(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Field must not be blank.")
    return value


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class CollaboratorDTO(BaseModel):
    """Client-side contact person. ``phone`` is stored as sanitised digits."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""

    @field_validator("phone", mode="before")
    @classmethod
    def sanitize_phone_number(cls, v: Any) -> Any:
        if v is None:
            return ""
        return sanitize_phone(v) if isinstance(v, str) else v


class EquipmentDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = ""
    brand: str = ""
    model: str = ""
    serial_number: str = ""


class CollaboratorPatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("phone", mode="before")
    @classmethod
    def sanitize_phone_number(cls, v: Any) -> Any:
        return sanitize_phone(v) if isinstance(v, str) else v


class EquipmentPatchDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None


class ContractedServiceDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateServiceOrderDTO(BaseModel):
    """Immutable DTO for service-order creation.

    ``status_id`` is optional; when given it must be an initial status.
    """

    model_config = ConfigDict(frozen=True)

    client_id: UUID
    collaborator: CollaboratorDTO
    equipment: EquipmentDTO
    reported_problem: str
    status_id: Optional[str] = None
    attachments: List[str] = []

    @field_validator("reported_problem")
    @classmethod
    def problem_must_not_be_blank(cls, v: str) -> str:
        return _strip_required(v)


class UpdateServiceOrderDetailsDTO(BaseModel):
    """Partial detail edit. Unsent fields are left alone and not audited."""

    model_config = ConfigDict(frozen=True)

    client_id: Optional[UUID] = None
    reported_problem: Optional[str] = None
    technical_solution: Optional[str] = None
    collaborator: Optional[CollaboratorPatchDTO] = None
    equipment: Optional[EquipmentPatchDTO] = None

    @field_validator("reported_problem")
    @classmethod
    def problem_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v)

    def changes(self) -> dict:
        """Fields explicitly sent, JSON-friendly (UUIDs as strings)."""
        return self.model_dump(mode="json", exclude_unset=True)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class LogEntryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    timestamp: datetime
    responsible: str
    from_status: str
    to_status: str
    observation: str = ""

    @classmethod
    def from_entity(cls, entry: ServiceOrderLog) -> LogEntryDTO:
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            responsible=entry.responsible,
            from_status=entry.from_status,
            to_status=entry.to_status,
            observation=entry.observation,
        )


class EditLogChangeDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    old_value: Any = None
    new_value: Any = None


class EditLogEntryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    timestamp: datetime
    responsible: str
    observation: str
    changes: List[EditLogChangeDTO]

    @classmethod
    def from_entity(cls, entry: ServiceOrderEditLog) -> EditLogEntryDTO:
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            responsible=entry.responsible,
            observation=entry.observation,
            changes=[EditLogChangeDTO(**change) for change in entry.changes],
        )


class ServiceOrderSummaryDTO(BaseModel):
    """Lightweight row for listings (no audit trails)."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    client_id: Optional[UUID]
    client_name: str
    collaborator: CollaboratorDTO
    equipment: EquipmentDTO
    status: StatusDTO
    analyst: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls, order: ServiceOrder, status: StatusDTO, client_name: str
    ) -> ServiceOrderSummaryDTO:
        return cls(
            id=order.id,
            order_number=order.order_number,
            client_id=order.client_id,
            client_name=client_name,
            collaborator=CollaboratorDTO(**(order.collaborator or {})),
            equipment=EquipmentDTO(**(order.equipment or {})),
            status=status,
            analyst=order.analyst,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class ServiceOrderDTO(BaseModel):
    """Fully enriched service order.

    Assumes ``logs`` and ``edit_logs`` are prefetched.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: str
    client_id: Optional[UUID]
    client_name: str
    collaborator: CollaboratorDTO
    equipment: EquipmentDTO
    reported_problem: str
    analyst: str
    status: StatusDTO
    technical_solution: str
    attachments: List[str]
    contracted_services: List[ContractedServiceDTO]
    confirmed_service_ids: List[str]
    created_at: datetime
    updated_at: datetime
    logs: List[LogEntryDTO]
    edit_logs: List[EditLogEntryDTO]

    @classmethod
    def from_entity(
        cls, order: ServiceOrder, status: StatusDTO, client_name: str
    ) -> ServiceOrderDTO:
        return cls(
            id=order.id,
            order_number=order.order_number,
            client_id=order.client_id,
            client_name=client_name,
            collaborator=CollaboratorDTO(**(order.collaborator or {})),
            equipment=EquipmentDTO(**(order.equipment or {})),
            reported_problem=order.reported_problem,
            analyst=order.analyst,
            status=status,
            technical_solution=order.technical_solution,
            attachments=list(order.attachments or []),
            contracted_services=[
                ContractedServiceDTO(**s) for s in order.contracted_services or []
            ],
            confirmed_service_ids=[str(i) for i in order.confirmed_service_ids or []],
            created_at=order.created_at,
            updated_at=order.updated_at,
            logs=[LogEntryDTO.from_entity(entry) for entry in order.logs.all()],
            edit_logs=[
                EditLogEntryDTO.from_entity(entry) for entry in order.edit_logs.all()
            ],
        )


class TransitionCandidateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: StatusDTO
    is_backward: bool


class UpdateServiceOrderResult(BaseModel):
    """``changed`` is False for a no-op call (nothing written, nothing sent)."""

    model_config = ConfigDict(frozen=True)

    order: ServiceOrderDTO
    changed: bool
    notifications: List[NotificationOutcome] = []
