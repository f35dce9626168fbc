from io import StringIO

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from modules.clients.models import Client
from modules.core.actors import Actor
from modules.orders.models import ServiceOrder, ServiceOrderLog
from modules.statuses.models import Status

pytestmark = pytest.mark.integration

User = get_user_model()


def _seed() -> str:
    out = StringIO()
    call_command("seed_data", stdout=out)
    return out.getvalue()


class TestSeedData:
    def test_seeds_workflow_and_orders(self):
        output = _seed()

        assert "Seed completed" in output
        assert Status.objects.count() == 5
        assert Status.objects.get(is_initial=True).name == "Aberta"
        pronta = Status.objects.get(name="Pronta para Entrega")
        assert list(pronta.allowed_next_statuses.values_list("name", flat=True)) == [
            "Entregue"
        ]
        assert ServiceOrder.objects.count() == 6
        assert ServiceOrderLog.objects.count() == 6
        assert Client.objects.get(name="Acme Tecnologia").cnpj == "11222333000181"

    def test_every_order_starts_open(self):
        _seed()
        aberta = Status.objects.get(name="Aberta")
        assert set(ServiceOrder.objects.values_list("status_id", flat=True)) == {
            str(aberta.id)
        }

    def test_supervisor_is_privileged(self):
        _seed()
        assert Actor.from_user(User.objects.get(username="supervisor")).privileged
        assert not Actor.from_user(User.objects.get(username="tecnico")).privileged

    def test_is_idempotent(self):
        _seed()
        output = _seed()

        assert "Skipping orders" in output
        assert Status.objects.count() == 5
        assert ServiceOrder.objects.count() == 6
