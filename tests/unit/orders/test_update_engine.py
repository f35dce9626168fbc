"""Unit tests for ServiceOrderService.update_order.

Covers:
- Allowed / rejected transitions and the administrative override.
- Pickup statuses requiring a technical solution.
- Notifying statuses requiring every contracted service confirmed.
- The no-op guard and repeated identical calls.
- Notification outcomes never rolling back the write.
"""

from __future__ import annotations

import pytest
from django.core import mail

from modules.core.actors import Actor
from modules.orders.exceptions import (
    PendingServiceConfirmation,
    ServiceOrderNotFound,
    TechnicalSolutionRequired,
)
from modules.orders.models import ServiceOrder, ServiceOrderLog
from modules.statuses.dtos import UNKNOWN_STATUS_ID
from modules.statuses.exceptions import InvalidStatusTransition, StatusNotFound

pytestmark = pytest.mark.unit

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def _id(status):
    return str(status.id)


def _log_count(order_dto):
    return ServiceOrderLog.objects.filter(order_id=order_dto.id).count()


class TestAllowedTransition:
    def test_moves_to_next_status_and_appends_log(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()

        result = order_service.update_order(
            str(order.id), _id(workflow["analise"]), alice
        )

        assert result.changed is True
        assert result.order.status.id == _id(workflow["analise"])
        assert len(result.order.logs) == 2
        second = result.order.logs[1]
        assert second.from_status == _id(workflow["aberta"])
        assert second.to_status == _id(workflow["analise"])
        assert second.responsible == "Alice"
        assert result.notifications == []

    def test_backward_edge_is_allowed(self, order_service, make_order, workflow, alice):
        order = make_order()
        order_service.update_order(str(order.id), _id(workflow["analise"]), alice)

        result = order_service.update_order(
            str(order.id), _id(workflow["aberta"]), alice
        )

        assert result.order.status.id == _id(workflow["aberta"])

    def test_observation_and_attachments_are_stored(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()
        result = order_service.update_order(
            str(order.id),
            _id(workflow["analise"]),
            alice,
            observation="Cliente autorizou.",
            attachments=["foto1.jpg"],
        )
        assert result.order.logs[-1].observation == "Cliente autorizou."
        assert result.order.attachments == ["foto1.jpg"]


class TestRejectedTransition:
    def test_status_outside_adjacency_is_rejected(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()

        with pytest.raises(InvalidStatusTransition) as exc_info:
            order_service.update_order(str(order.id), _id(workflow["cancelada"]), alice)

        assert exc_info.value.current_status_id == _id(workflow["aberta"])
        stored = ServiceOrder.objects.get(id=order.id)
        assert stored.status_id == _id(workflow["aberta"])
        assert _log_count(order) == 1

    def test_privileged_actor_may_jump(
        self, order_service, make_order, workflow, admin_actor
    ):
        order = make_order()
        result = order_service.update_order(
            str(order.id), _id(workflow["cancelada"]), admin_actor
        )
        assert result.order.status.id == _id(workflow["cancelada"])
        assert result.order.logs[-1].responsible == "Admin"

    def test_unknown_order(self, order_service, workflow, alice):
        with pytest.raises(ServiceOrderNotFound):
            order_service.update_order(MISSING_ID, _id(workflow["analise"]), alice)

    def test_unknown_target_status(self, order_service, make_order, alice):
        order = make_order()
        with pytest.raises(StatusNotFound):
            order_service.update_order(str(order.id), MISSING_ID, alice)
        assert _log_count(order) == 1

    def test_dangling_current_status_blocks_non_privileged(
        self, order_service, make_order, workflow, alice, admin_actor
    ):
        order = make_order()
        ServiceOrder.objects.filter(id=order.id).update(status_id=MISSING_ID)

        assert order_service.get_order(str(order.id)).status.id == UNKNOWN_STATUS_ID
        with pytest.raises(InvalidStatusTransition):
            order_service.update_order(str(order.id), _id(workflow["analise"]), alice)

        result = order_service.update_order(
            str(order.id), _id(workflow["analise"]), admin_actor
        )
        assert result.order.status.id == _id(workflow["analise"])


class TestPickupRequiresTechnicalSolution:
    @pytest.fixture()
    def in_analysis(self, order_service, make_order, workflow, alice):
        order = make_order()
        order_service.update_order(str(order.id), _id(workflow["analise"]), alice)
        return order

    def test_blank_solution_is_rejected_before_writing(
        self, order_service, in_analysis, workflow, alice
    ):
        with pytest.raises(TechnicalSolutionRequired):
            order_service.update_order(
                str(in_analysis.id),
                _id(workflow["pronta"]),
                alice,
                technical_solution="   ",
            )
        stored = ServiceOrder.objects.get(id=in_analysis.id)
        assert stored.status_id == _id(workflow["analise"])
        assert _log_count(in_analysis) == 2

    def test_existing_solution_is_enough(
        self, order_service, in_analysis, workflow, alice
    ):
        ServiceOrder.objects.filter(id=in_analysis.id).update(
            technical_solution="Fonte trocada."
        )
        result = order_service.update_order(
            str(in_analysis.id), _id(workflow["pronta"]), alice
        )
        assert result.order.status.id == _id(workflow["pronta"])

    def test_supplied_solution_is_stored(
        self, order_service, in_analysis, workflow, alice
    ):
        result = order_service.update_order(
            str(in_analysis.id),
            _id(workflow["pronta"]),
            alice,
            technical_solution="Fonte trocada.",
        )
        assert result.order.technical_solution == "Fonte trocada."


class TestPendingServiceConfirmation:
    @pytest.fixture()
    def order(self, order_service, make_order, workflow, client_with_services, alice):
        order = make_order(client=client_with_services)
        order_service.update_order(str(order.id), _id(workflow["analise"]), alice)
        return order

    def test_unconfirmed_services_block_notifying_status(
        self, order_service, order, workflow, provided_services, alice
    ):
        with pytest.raises(PendingServiceConfirmation) as exc_info:
            order_service.update_order(
                str(order.id),
                _id(workflow["pronta"]),
                alice,
                technical_solution="Ok.",
                confirmed_service_ids=[str(provided_services[0].id)],
            )
        assert exc_info.value.pending_service_ids == [str(provided_services[1].id)]
        stored = ServiceOrder.objects.get(id=order.id)
        assert stored.status_id == _id(workflow["analise"])
        assert stored.confirmed_service_ids == []

    def test_all_confirmed_passes(
        self, order_service, order, workflow, provided_services, alice
    ):
        confirmed = [str(s.id) for s in reversed(provided_services)]
        result = order_service.update_order(
            str(order.id),
            _id(workflow["pronta"]),
            alice,
            technical_solution="Ok.",
            confirmed_service_ids=confirmed,
        )
        assert result.changed is True
        assert set(result.order.confirmed_service_ids) == set(confirmed)

    def test_non_notifying_status_does_not_need_confirmation(
        self, order_service, order, workflow, alice
    ):
        result = order_service.update_order(
            str(order.id), _id(workflow["aguardando"]), alice
        )
        assert result.order.status.id == _id(workflow["aguardando"])


class TestNoOpGuard:
    def test_same_status_without_changes_writes_nothing(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()
        before = ServiceOrder.objects.get(id=order.id).updated_at

        result = order_service.update_order(
            str(order.id), _id(workflow["aberta"]), alice
        )

        assert result.changed is False
        assert result.notifications == []
        assert _log_count(order) == 1
        assert ServiceOrder.objects.get(id=order.id).updated_at == before

    def test_repeated_identical_call_is_a_noop(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()
        args = (str(order.id), _id(workflow["analise"]), alice)

        first = order_service.update_order(*args, technical_solution="Diagnóstico")
        second = order_service.update_order(*args, technical_solution="Diagnóstico")

        assert first.changed is True
        assert second.changed is False
        assert _log_count(order) == 2

    def test_confirmed_ids_compared_as_a_set(
        self,
        order_service,
        make_order,
        workflow,
        client_with_services,
        provided_services,
        alice,
    ):
        order = make_order(client=client_with_services)
        ids = [str(s.id) for s in provided_services]
        order_service.update_order(
            str(order.id), _id(workflow["aberta"]), alice, confirmed_service_ids=ids
        )

        result = order_service.update_order(
            str(order.id),
            _id(workflow["aberta"]),
            alice,
            confirmed_service_ids=list(reversed(ids)),
        )

        assert result.changed is False
        assert _log_count(order) == 2

    def test_solution_change_without_status_change_is_logged(
        self, order_service, make_order, workflow, alice
    ):
        order = make_order()
        result = order_service.update_order(
            str(order.id), _id(workflow["aberta"]), alice, technical_solution="Nota"
        )
        assert result.changed is True
        last = result.order.logs[-1]
        assert last.from_status == last.to_status == _id(workflow["aberta"])


class TestNotificationsAfterWrite:
    def _to_ready(self, order_service, make_order, workflow, alice):
        order = make_order()
        order_service.update_order(str(order.id), _id(workflow["analise"]), alice)
        return order_service.update_order(
            str(order.id),
            _id(workflow["pronta"]),
            alice,
            technical_solution="Troca da fonte.",
        )

    def test_email_contains_client_name(
        self, order_service, make_order, workflow, alice, email_settings, client_record
    ):
        result = self._to_ready(order_service, make_order, workflow, alice)

        email = next(o for o in result.notifications if o.channel == "email")
        assert email.sent is True
        html = mail.outbox[0].alternatives[0][0]
        assert client_record.name in html
        assert "{{clientName}}" not in html
        assert result.order.order_number in mail.outbox[0].subject

    def test_whatsapp_sent_through_http(
        self,
        order_service,
        make_order,
        workflow,
        alice,
        whatsapp_settings,
        http_requests,
    ):
        result = self._to_ready(order_service, make_order, workflow, alice)

        whatsapp = next(o for o in result.notifications if o.channel == "whatsapp")
        assert whatsapp.sent is True
        assert b"Troca da fonte." in http_requests[0].content

    def test_failed_channels_keep_the_write(
        self, order_service, make_order, workflow, alice
    ):
        result = self._to_ready(order_service, make_order, workflow, alice)

        assert result.changed is True
        assert {o.channel for o in result.notifications} == {"email", "whatsapp"}
        assert not any(o.sent for o in result.notifications)
        stored = ServiceOrder.objects.get(id=result.order.id)
        assert stored.status_id == _id(workflow["pronta"])

    def test_no_notifications_without_status_change(
        self, order_service, make_order, workflow, alice, email_settings
    ):
        self._to_ready(order_service, make_order, workflow, alice)
        mail.outbox.clear()
        order_id = ServiceOrder.objects.get().id

        result = order_service.update_order(
            str(order_id),
            _id(workflow["pronta"]),
            Actor(name="Alice"),
            technical_solution="Troca da fonte e limpeza.",
        )

        assert result.changed is True
        assert result.notifications == []
        assert mail.outbox == []
