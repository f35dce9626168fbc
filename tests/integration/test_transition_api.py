"""Integration tests for status transitions over HTTP.

Covers:
- GET /service-orders/{id}/transitions/ for regular and privileged users.
- POST /service-orders/{id}/transition/ success envelope and error mapping.
- Notification outcomes reported inside the success envelope.
"""

from __future__ import annotations

import uuid

import pytest
from django.core import mail

pytestmark = pytest.mark.integration

URL = "/api/v1/service-orders/"


def _transition(client, order_id, **data):
    return client.post(f"{URL}{order_id}/transition/", data, format="json")


class TestAvailableTransitions:
    def test_technician_sees_configured_edges(self, auth_client, make_order, workflow):
        order = make_order()

        response = auth_client.get(f"{URL}{order.id}/transitions/")

        assert response.status_code == 200
        assert [c["status"]["id"] for c in response.json()] == [
            str(workflow["analise"].id)
        ]

    def test_backward_edges_listed_first(
        self, auth_client, make_order, order_service, workflow, alice
    ):
        order = make_order()
        order_service.update_order(str(order.id), str(workflow["analise"].id), alice)

        data = auth_client.get(f"{URL}{order.id}/transitions/").json()

        assert [(c["status"]["name"], c["is_backward"]) for c in data] == [
            ("Aberta", True),
            ("Aguardando Peça", False),
            ("Pronta para Entrega", False),
        ]

    def test_supervisor_sees_every_other_status(
        self, supervisor_client, make_order, workflow
    ):
        order = make_order()

        data = supervisor_client.get(f"{URL}{order.id}/transitions/").json()

        assert len(data) == len(workflow) - 1
        assert str(workflow["aberta"].id) not in {c["status"]["id"] for c in data}

    def test_missing_order(self, auth_client):
        response = auth_client.get(f"{URL}{uuid.uuid4()}/transitions/")
        assert response.status_code == 404


class TestTransition:
    def test_allowed_transition(self, auth_client, make_order, workflow):
        order = make_order()

        response = _transition(
            auth_client,
            order.id,
            status_id=str(workflow["analise"].id),
            observation="Iniciando diagnóstico.",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["order"]["status"]["id"] == str(workflow["analise"].id)
        assert data["order"]["logs"][-1]["observation"] == "Iniciando diagnóstico."
        assert data["order"]["logs"][-1]["responsible"] == "Alice"
        assert data["notifications"] == []

    def test_invalid_transition(self, auth_client, make_order, workflow):
        order = make_order()

        response = _transition(
            auth_client, order.id, status_id=str(workflow["entregue"].id)
        )

        assert response.status_code == 400
        assert response.json()["current_status_id"] == str(workflow["aberta"].id)

    def test_supervisor_may_jump(self, supervisor_client, make_order, workflow):
        order = make_order()

        response = _transition(
            supervisor_client, order.id, status_id=str(workflow["cancelada"].id)
        )

        assert response.status_code == 200
        assert response.json()["order"]["logs"][-1]["responsible"] == "Sofia"

    def test_missing_status_id(self, auth_client, make_order):
        order = make_order()
        response = _transition(auth_client, order.id)
        assert response.status_code == 400

    def test_unknown_status(self, auth_client, make_order):
        order = make_order()
        response = _transition(auth_client, order.id, status_id=str(uuid.uuid4()))
        assert response.status_code == 404

    def test_unknown_order(self, auth_client, workflow):
        response = _transition(
            auth_client, uuid.uuid4(), status_id=str(workflow["analise"].id)
        )
        assert response.status_code == 404

    def test_noop(self, auth_client, make_order, workflow):
        order = make_order()

        response = _transition(
            auth_client, order.id, status_id=str(workflow["aberta"].id)
        )

        assert response.status_code == 200
        assert response.json()["changed"] is False
        assert len(response.json()["order"]["logs"]) == 1


class TestPickupTransition:
    @pytest.fixture()
    def in_analysis(
        self, make_order, order_service, workflow, alice, client_with_services
    ):
        order = make_order(client=client_with_services)
        order_service.update_order(str(order.id), str(workflow["analise"].id), alice)
        return order

    def test_requires_technical_solution(self, auth_client, in_analysis, workflow):
        response = _transition(
            auth_client, in_analysis.id, status_id=str(workflow["pronta"].id)
        )
        assert response.status_code == 400

    def test_reports_pending_services(
        self, auth_client, in_analysis, workflow, provided_services
    ):
        response = _transition(
            auth_client,
            in_analysis.id,
            status_id=str(workflow["pronta"].id),
            technical_solution="Troca de SSD.",
        )

        assert response.status_code == 400
        assert set(response.json()["pending_service_ids"]) == {
            str(s.id) for s in provided_services
        }

    def test_success_sends_email(
        self, auth_client, in_analysis, workflow, provided_services, email_settings
    ):
        response = _transition(
            auth_client,
            in_analysis.id,
            status_id=str(workflow["pronta"].id),
            technical_solution="Troca de SSD.",
            confirmed_service_ids=[str(s.id) for s in provided_services],
        )

        assert response.status_code == 200
        outcomes = {n["channel"]: n for n in response.json()["notifications"]}
        assert outcomes["email"]["sent"] is True
        assert outcomes["whatsapp"]["sent"] is False
        assert outcomes["whatsapp"]["stage"] == "load_settings"
        assert mail.outbox[0].to == ["Beta SA <ti@beta.example.com>"]
