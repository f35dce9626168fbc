from __future__ import annotations

import httpx
import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from rest_framework.test import APIClient

from modules.clients.models import Client, ProvidedService
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.actors import Actor
from modules.notifications.models import IntegrationSetting
from modules.notifications.pipeline import NotificationPipeline
from modules.notifications.repositories.django_repository import (
    SettingsDjangoRepository,
)
from modules.orders.dtos import CollaboratorDTO, CreateServiceOrderDTO, EquipmentDTO
from modules.orders.repositories.django_repository import ServiceOrderDjangoRepository
from modules.orders.services import ServiceOrderService
from modules.statuses.models import Status
from modules.statuses.repositories.django_repository import StatusDjangoRepository
from modules.statuses.services import StatusRegistry

User = get_user_model()

WHATSAPP_ENDPOINT = "https://whatsapp.example.com/api/messages/send"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users / actors
# ---------------------------------------------------------------------------


@pytest.fixture()
def technician():
    return User.objects.create_user(
        username="tecnico", password="testpass123", first_name="Alice"
    )


@pytest.fixture()
def supervisor():
    user = User.objects.create_user(
        username="supervisor", password="testpass123", first_name="Sofia"
    )
    user.user_permissions.add(
        Permission.objects.get(
            codename="override_transition", content_type__app_label="statuses"
        )
    )
    return User.objects.get(pk=user.pk)


@pytest.fixture()
def auth_client(technician):
    """APIClient force-authenticated as a non-privileged technician."""
    client = APIClient()
    client.force_authenticate(user=technician)
    return client


@pytest.fixture()
def supervisor_client(supervisor):
    client = APIClient()
    client.force_authenticate(user=supervisor)
    return client


@pytest.fixture()
def alice():
    return Actor(name="Alice")


@pytest.fixture()
def admin_actor():
    return Actor(name="Admin", privileged=True)


# ---------------------------------------------------------------------------
# Status workflow
# ---------------------------------------------------------------------------


@pytest.fixture()
def workflow():
    """aberta -> analise -> pronta -> entregue, analise <-> aguardando.

    ``cancelada`` has no edges at all.
    """
    statuses = {
        "aberta": Status.objects.create(
            name="Aberta", order=1, color="#3B82F6", is_initial=True
        ),
        "analise": Status.objects.create(name="Em Análise", order=2, color="#F59E0B"),
        "aguardando": Status.objects.create(
            name="Aguardando Peça", order=3, color="#A855F7"
        ),
        "pronta": Status.objects.create(
            name="Pronta para Entrega",
            order=4,
            color="#22C55E",
            is_pickup_status=True,
            triggers_email=True,
            triggers_whatsapp=True,
            email_subject="OS {{osNumber}} pronta",
            email_body="Olá {{clientName}}, sua OS {{osNumber}} está {{statusName}}.",
            whatsapp_body=(
                "Olá {{collaboratorName}}! OS {{osNumber}}: {{technicalSolution}}"
            ),
        ),
        "entregue": Status.objects.create(
            name="Entregue",
            order=5,
            color="#6B7280",
            is_final=True,
            triggers_email=True,
            email_body="OS {os_number} entregue para {client_name}.",
        ),
        "cancelada": Status.objects.create(name="Cancelada", order=6, color="#EF4444"),
    }
    statuses["aberta"].allowed_next_statuses.set([statuses["analise"]])
    statuses["analise"].allowed_next_statuses.set(
        [statuses["aguardando"], statuses["pronta"]]
    )
    statuses["analise"].allowed_previous_statuses.set([statuses["aberta"]])
    statuses["aguardando"].allowed_next_statuses.set([statuses["analise"]])
    statuses["pronta"].allowed_next_statuses.set([statuses["entregue"]])
    statuses["pronta"].allowed_previous_statuses.set([statuses["analise"]])
    return statuses


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def provided_services():
    return [
        ProvidedService.objects.create(name="Backup", description="Backup diário"),
        ProvidedService.objects.create(name="EDR", description="Endpoint protection"),
    ]


@pytest.fixture()
def client_record():
    """Client without contracted services."""
    return Client.objects.create(name="Acme Ltda", email="contato@acme.example.com")


@pytest.fixture()
def client_with_services(provided_services):
    client = Client.objects.create(name="Beta SA", email="ti@beta.example.com")
    client.contracted_services.set(provided_services)
    return client


# ---------------------------------------------------------------------------
# Integration settings / outbound HTTP
# ---------------------------------------------------------------------------


@pytest.fixture()
def http_requests():
    """Requests captured by ``http_client``."""
    return []


@pytest.fixture()
def http_client(http_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        http_requests.append(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture()
def email_settings():
    return IntegrationSetting.objects.create(
        key=IntegrationSetting.EMAIL,
        data={
            "provider": "smtp",
            "smtp_server": "smtp.example.com",
            "smtp_port": 587,
            "smtp_security": "starttls",
            "sender_email": "suporte@tsmit.example.com",
            "smtp_password": "not-a-real-password",
        },
    )


@pytest.fixture()
def whatsapp_settings():
    return IntegrationSetting.objects.create(
        key=IntegrationSetting.WHATSAPP,
        data={"endpoint": WHATSAPP_ENDPOINT, "bearer_token": "wa-token"},
    )


# ---------------------------------------------------------------------------
# Service orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service(http_client):
    return ServiceOrderService(
        order_repository=ServiceOrderDjangoRepository(),
        client_repository=ClientDjangoRepository(),
        status_registry=StatusRegistry(StatusDjangoRepository()),
        notification_pipeline=NotificationPipeline.default(
            SettingsDjangoRepository(), http_client=http_client
        ),
    )


@pytest.fixture()
def make_order(order_service, workflow, client_record, alice):
    """Factory creating orders through the service (logs[0] included)."""

    def _make(client=None, actor=None, **overrides):
        dto = CreateServiceOrderDTO(
            client_id=(client or client_record).id,
            collaborator=overrides.pop(
                "collaborator",
                CollaboratorDTO(
                    name="Carlos", email="carlos@example.com", phone="(11) 98765-4321"
                ),
            ),
            equipment=overrides.pop(
                "equipment",
                EquipmentDTO(
                    type="Notebook", brand="Dell", model="Latitude", serial_number="SN1"
                ),
            ),
            reported_problem=overrides.pop(
                "reported_problem", "Não liga após queda."
            ),
            **overrides,
        )
        return order_service.create_order(dto, actor or alice)

    return _make
