"""Unit tests for ServiceOrderService.create_order."""

from __future__ import annotations

import uuid

import pytest

from modules.clients.exceptions import ClientNotFound
from modules.orders.constants import CREATION_OBSERVATION
from modules.orders.dtos import CollaboratorDTO, CreateServiceOrderDTO, EquipmentDTO
from modules.orders.exceptions import InvalidInitialStatus
from modules.orders.models import ServiceOrder
from modules.statuses.exceptions import NoInitialStatusConfigured
from modules.statuses.models import Status

pytestmark = pytest.mark.unit


def _dto(client_id, **overrides):
    data = {
        "client_id": client_id,
        "collaborator": CollaboratorDTO(name="Carlos"),
        "equipment": EquipmentDTO(type="Desktop"),
        "reported_problem": "Não inicializa o sistema.",
    }
    data.update(overrides)
    return CreateServiceOrderDTO(**data)


class TestCreateOrder:
    def test_starts_in_initial_status_with_creation_log(
        self, make_order, workflow, alice
    ):
        order = make_order()

        aberta = str(workflow["aberta"].id)
        assert order.status.id == aberta
        [entry] = order.logs
        assert entry.from_status == entry.to_status == aberta
        assert entry.responsible == "Alice"
        assert entry.observation == CREATION_OBSERVATION
        assert order.analyst == "Alice"
        assert order.edit_logs == []

    def test_order_numbers_are_sequential(self, make_order):
        first = make_order()
        second = make_order()

        assert first.order_number == "OS-001"
        assert second.order_number == "OS-002"

    def test_numbers_are_not_reused_after_delete(self, order_service, make_order):
        first = make_order()
        order_service.delete_order(str(first.id))

        assert make_order().order_number == "OS-002"

    def test_contracted_services_are_snapshotted(
        self, make_order, client_with_services, provided_services
    ):
        order = make_order(client=client_with_services)
        provided_services[0].name = "Backup em nuvem"
        provided_services[0].save()
        client_with_services.contracted_services.clear()

        stored = ServiceOrder.objects.get(id=order.id)

        assert {s["name"] for s in stored.contracted_services} == {"Backup", "EDR"}
        assert stored.contracted_service_ids == {str(s.id) for s in provided_services}
        assert order.confirmed_service_ids == []

    def test_collaborator_phone_is_sanitized(self, make_order):
        order = make_order()
        assert order.collaborator.phone == "5511987654321"

    def test_client_name_is_resolved(self, make_order, client_record):
        assert make_order().client_name == client_record.name

    def test_explicit_initial_status(
        self, order_service, workflow, client_record, alice
    ):
        initial = Status.objects.create(name="Triagem", order=9, is_initial=True)

        order = order_service.create_order(
            _dto(client_record.id, status_id=str(initial.id)), alice
        )

        assert order.status.id == str(initial.id)

    def test_non_initial_status_is_rejected(
        self, order_service, workflow, client_record, alice
    ):
        with pytest.raises(InvalidInitialStatus):
            order_service.create_order(
                _dto(client_record.id, status_id=str(workflow["analise"].id)), alice
            )
        assert ServiceOrder.objects.count() == 0

    def test_unknown_status_id_is_rejected(
        self, order_service, workflow, client_record, alice
    ):
        with pytest.raises(InvalidInitialStatus):
            order_service.create_order(
                _dto(client_record.id, status_id=str(uuid.uuid4())), alice
            )

    def test_no_initial_status_configured(self, order_service, client_record, alice):
        Status.objects.create(name="Em Análise", order=1)

        with pytest.raises(NoInitialStatusConfigured):
            order_service.create_order(_dto(client_record.id), alice)

    def test_unknown_client(self, order_service, workflow, alice):
        with pytest.raises(ClientNotFound):
            order_service.create_order(_dto(uuid.uuid4()), alice)
        assert ServiceOrder.objects.count() == 0


class TestClientRemoved:
    def test_missing_client_is_reported_by_name(self, order_service, make_order):
        order = make_order()
        ServiceOrder.objects.filter(id=order.id).update(client=None)

        assert order_service.get_order(str(order.id)).client_name == (
            "Cliente não encontrado"
        )
