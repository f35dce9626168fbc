"""Service-order service layer (Use Cases).

``ServiceOrderService`` is the order update engine and the edit audit
engine. Collaborators are injected through the constructor: the order
and client repositories, the status registry and the notification
pipeline.

Business rules enforced:
- Orders start in an initial status; ``logs[0]`` records creation with
  ``from_status == to_status``.
- Non-privileged actors only follow the configured next/previous edges.
- Entering a pickup status needs a technical solution.
- Entering a notifying status needs every contracted service confirmed.
- Repeating an update with nothing new writes nothing and sends nothing.
- Notifications run after the write commits; their failures are reported,
  never raised.
- Detail edits append one edit-log entry listing only real changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

import structlog
from django.db import transaction

from modules.clients.exceptions import ClientNotFound
from modules.notifications.dtos import NotificationSubject
from modules.orders.audit import diff_fields, snapshot
from modules.orders.constants import (
    CREATION_OBSERVATION,
    DETAILS_EDITED_OBSERVATION,
    MISSING_CLIENT_NAME,
)
from modules.orders.dtos import (
    ServiceOrderDTO,
    ServiceOrderSummaryDTO,
    TransitionCandidateDTO,
    UpdateServiceOrderResult,
)
from modules.orders.exceptions import (
    InvalidInitialStatus,
    PendingServiceConfirmation,
    ServiceOrderNotFound,
    TechnicalSolutionRequired,
)
from modules.statuses.dtos import UNKNOWN_STATUS
from modules.statuses.exceptions import InvalidStatusTransition, StatusNotFound
from modules.statuses.transitions import assert_can_transition, compute_candidates

if TYPE_CHECKING:
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.core.actors import Actor
    from modules.notifications.pipeline import NotificationPipeline
    from modules.orders.dtos import CreateServiceOrderDTO, UpdateServiceOrderDetailsDTO
    from modules.orders.models import ServiceOrder
    from modules.orders.repositories.interfaces import IServiceOrderRepository
    from modules.statuses.dtos import StatusDTO
    from modules.statuses.services import StatusRegistry

logger = structlog.get_logger(__name__)


class ServiceOrderService:
    """Application service for service-order use-cases."""

    def __init__(
        self,
        order_repository: IServiceOrderRepository,
        client_repository: IClientRepository,
        status_registry: StatusRegistry,
        notification_pipeline: NotificationPipeline,
    ) -> None:
        self._order_repo = order_repository
        self._client_repo = client_repository
        self._registry = status_registry
        self._notifications = notification_pipeline

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateServiceOrderDTO, actor: Actor) -> ServiceOrderDTO:
        """Create an order in an initial status.

        Raises:
            ClientNotFound: the client does not exist.
            InvalidInitialStatus: ``dto.status_id`` is not an initial status.
            NoInitialStatusConfigured: no status id given and none is initial.
        """
        log = logger.bind(client_id=str(dto.client_id), actor=actor.name)

        client = self._client_repo.get_by_id(str(dto.client_id))
        if not client:
            raise ClientNotFound(f"Client {dto.client_id} not found.")

        if dto.status_id:
            status = self._registry.get_status_by_id(dto.status_id)
            if status is None or not status.is_initial:
                log.warning(
                    "service_order.invalid_initial_status", status_id=dto.status_id
                )
                raise InvalidInitialStatus(
                    f"Status {dto.status_id} is not an initial status."
                )
        else:
            status = self._registry.get_initial_status()

        order = self._order_repo.create(
            {
                "order_number": self._order_repo.next_order_number(),
                "client": client,
                "collaborator": dto.collaborator.model_dump(),
                "equipment": dto.equipment.model_dump(),
                "reported_problem": dto.reported_problem,
                "analyst": actor.name,
                "status_id": status.id,
                "attachments": list(dto.attachments),
                "contracted_services": [
                    service.to_snapshot()
                    for service in client.contracted_services.all()
                ],
                "confirmed_service_ids": [],
            }
        )
        self._order_repo.append_log(
            order,
            from_status=status.id,
            to_status=status.id,
            responsible=actor.name,
            observation=CREATION_OBSERVATION,
        )
        log.info(
            "service_order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            status_id=status.id,
        )
        return self.get_order(str(order.id))

    def update_order(
        self,
        order_id: str,
        new_status_id: str,
        actor: Actor,
        technical_solution: Optional[str] = None,
        observation: Optional[str] = None,
        attachments: Optional[List[str]] = None,
        confirmed_service_ids: Optional[List[str]] = None,
    ) -> UpdateServiceOrderResult:
        """Move an order to ``new_status_id`` and/or update its solution data.

        ``None`` arguments mean "leave as is". Validation happens under a row
        lock before anything is written; notifications are dispatched only
        after the transaction is closed.

        Raises:
            ServiceOrderNotFound: the order does not exist.
            StatusNotFound: the target status does not exist.
            InvalidStatusTransition: the actor may not take this edge.
            TechnicalSolutionRequired: pickup status without a solution.
            PendingServiceConfirmation: notifying status with unconfirmed
                contracted services.
        """
        log = logger.bind(
            order_id=str(order_id), new_status_id=str(new_status_id), actor=actor.name
        )

        with transaction.atomic():
            order = self._order_repo.get_for_update(str(order_id))
            if not order:
                raise ServiceOrderNotFound(f"Service order {order_id} not found.")

            target = self._registry.get_status_by_id(str(new_status_id))
            if target is None:
                raise StatusNotFound(f"Status {new_status_id} not found.")

            current_status_id = order.status_id
            is_status_changing = target.id != current_status_id
            log = log.bind(current_status_id=current_status_id)

            if is_status_changing and not actor.privileged:
                try:
                    assert_can_transition(
                        current_status_id,
                        target.id,
                        self._registry.build_graph(),
                        privileged=False,
                    )
                except InvalidStatusTransition:
                    log.warning("service_order.invalid_transition")
                    raise

            effective_solution = (
                technical_solution
                if technical_solution is not None
                else order.technical_solution
            )
            if target.is_pickup_status and not (effective_solution or "").strip():
                log.warning("service_order.technical_solution_required")
                raise TechnicalSolutionRequired(
                    f"Status '{target.name}' requires a technical solution."
                )

            effective_confirmed = (
                confirmed_service_ids
                if confirmed_service_ids is not None
                else order.confirmed_service_ids
            )
            if is_status_changing and target.triggers_notification:
                pending = sorted(
                    order.contracted_service_ids - {str(i) for i in effective_confirmed}
                )
                if pending:
                    log.warning("service_order.pending_services", pending=pending)
                    raise PendingServiceConfirmation(
                        "Every contracted service must be confirmed first.",
                        pending_service_ids=pending,
                    )

            solution_changed = (
                technical_solution is not None
                and technical_solution != order.technical_solution
            )
            confirmed_changed = confirmed_service_ids is not None and set(
                map(str, confirmed_service_ids)
            ) != set(map(str, order.confirmed_service_ids or []))

            if not (is_status_changing or solution_changed or confirmed_changed):
                log.info("service_order.update_noop")
                return UpdateServiceOrderResult(
                    order=self.get_order(str(order_id)), changed=False
                )

            self._order_repo.append_log(
                order,
                from_status=current_status_id,
                to_status=target.id,
                responsible=actor.name,
                observation=observation or "",
            )
            update_fields = ["status_id"]
            order.status_id = target.id
            if technical_solution is not None:
                order.technical_solution = technical_solution
                update_fields.append("technical_solution")
            if attachments is not None:
                order.attachments = list(attachments)
                update_fields.append("attachments")
            if confirmed_service_ids is not None:
                order.confirmed_service_ids = [str(i) for i in confirmed_service_ids]
                update_fields.append("confirmed_service_ids")
            self._order_repo.save(order, update_fields=update_fields)

            log.info(
                "service_order.status_updated",
                status_changed=is_status_changing,
                fields=update_fields,
            )

        notifications = []
        if is_status_changing and target.triggers_notification:
            notifications = self._notifications.dispatch(
                self._notification_subject(order), target
            )

        return UpdateServiceOrderResult(
            order=self.get_order(str(order_id)),
            changed=True,
            notifications=notifications,
        )

    @transaction.atomic
    def update_order_details(
        self,
        order_id: str,
        dto: UpdateServiceOrderDetailsDTO,
        actor: Actor,
    ) -> ServiceOrderDTO:
        """Apply a partial detail edit and audit what actually changed.

        Raises:
            ServiceOrderNotFound: the order does not exist.
            ClientNotFound: the new client does not exist.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise ServiceOrderNotFound(f"Service order {order_id} not found.")

        log = logger.bind(order_id=str(order_id), actor=actor.name)

        changes = {k: v for k, v in dto.changes().items() if v is not None}
        for group in ("collaborator", "equipment"):
            if group in changes:
                changes[group] = {
                    k: v for k, v in changes[group].items() if v is not None
                }

        diffs = diff_fields(snapshot(order), changes)
        if not diffs:
            log.info("service_order.details_unchanged")
            return self.get_order(str(order_id))

        update_fields: List[str] = []
        for change in diffs:
            if change.field == "client_id":
                client = self._client_repo.get_by_id(str(change.new_value))
                if not client:
                    raise ClientNotFound(f"Client {change.new_value} not found.")
                order.client = client
                update_fields.append("client")
            elif "." in change.field:
                group, key = change.field.split(".", 1)
                nested = dict(getattr(order, group) or {})
                nested[key] = change.new_value
                setattr(order, group, nested)
                update_fields.append(group)
            else:
                setattr(order, change.field, change.new_value)
                update_fields.append(change.field)

        self._order_repo.save(order, update_fields=list(dict.fromkeys(update_fields)))
        self._order_repo.append_edit_log(
            order,
            responsible=actor.name,
            observation=DETAILS_EDITED_OBSERVATION,
            changes=[change.model_dump(mode="json") for change in diffs],
        )
        log.info(
            "service_order.details_updated",
            fields=[change.field for change in diffs],
        )
        return self.get_order(str(order_id))

    @transaction.atomic
    def delete_order(self, order_id: str) -> None:
        """Soft-delete an order. Raises ``ServiceOrderNotFound``."""
        if not self._order_repo.delete(str(order_id)):
            raise ServiceOrderNotFound(f"Service order {order_id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> ServiceOrderDTO:
        """Raises ``ServiceOrderNotFound``."""
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise ServiceOrderNotFound(f"Service order {order_id} not found.")
        return ServiceOrderDTO.from_entity(
            order, self._resolve_status(order.status_id), self._client_name(order)
        )

    def list_orders(
        self, orders: Iterable[ServiceOrder]
    ) -> List[ServiceOrderSummaryDTO]:
        """Enrich a page of orders with one status lookup for the whole page."""
        status_map = self._registry.status_map()
        return [
            ServiceOrderSummaryDTO.from_entity(
                order,
                status_map.get(order.status_id, UNKNOWN_STATUS),
                self._client_name(order),
            )
            for order in orders
        ]

    def ready_for_pickup(self) -> List[ServiceOrderSummaryDTO]:
        pickup_ids = [
            s.id for s in self._registry.list_statuses() if s.is_pickup_status
        ]
        if not pickup_ids:
            return []
        return self.list_orders(self._order_repo.list({"status_id__in": pickup_ids}))

    def available_transitions(
        self, order_id: str, actor: Actor
    ) -> List[TransitionCandidateDTO]:
        """Statuses the actor may move the order to, in display order."""
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise ServiceOrderNotFound(f"Service order {order_id} not found.")
        graph = self._registry.build_graph()
        return [
            TransitionCandidateDTO(
                status=graph.get(candidate.status_id), is_backward=candidate.is_backward
            )
            for candidate in compute_candidates(
                order.status_id, graph, actor.privileged
            )
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_status(self, status_id: str) -> StatusDTO:
        status = self._registry.get_status_by_id(status_id)
        if status is None:
            logger.warning("service_order.unknown_status", status_id=status_id)
            return UNKNOWN_STATUS
        return status

    @staticmethod
    def _client_name(order: ServiceOrder) -> str:
        if order.client_id and order.client:
            return order.client.name
        return MISSING_CLIENT_NAME

    def _notification_subject(self, order: ServiceOrder) -> NotificationSubject:
        client = order.client if order.client_id else None
        collaborator: Dict[str, str] = order.collaborator or {}
        return NotificationSubject(
            order_id=str(order.id),
            order_number=order.order_number,
            created_at=order.created_at,
            client_name=client.name if client else "",
            client_email=client.email if client else "",
            collaborator_name=collaborator.get("name", "") or "",
            collaborator_email=collaborator.get("email", "") or "",
            collaborator_phone=collaborator.get("phone", "") or "",
            equipment={k: str(v or "") for k, v in (order.equipment or {}).items()},
            reported_problem=order.reported_problem,
            technical_solution=order.technical_solution,
        )
