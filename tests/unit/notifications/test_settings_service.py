"""Tests for IntegrationSettingsService (masked reads, validated writes)."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.notifications.exceptions import UnknownSettingsDocument
from modules.notifications.models import IntegrationSetting
from modules.notifications.repositories.django_repository import (
    SettingsDjangoRepository,
)
from modules.notifications.services import SECRET_MASK, IntegrationSettingsService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return IntegrationSettingsService(SettingsDjangoRepository())


def _stored(key):
    return IntegrationSetting.objects.get(key=key).data


class TestGetSettings:
    def test_email_secrets_are_masked(self, service, email_settings):
        data = service.get_settings("email")

        assert data["smtp_server"] == "smtp.example.com"
        assert data["smtp_security"] == "starttls"
        assert data["smtp_password"] == SECRET_MASK
        assert data["api_key"] == ""

    def test_missing_document_returns_defaults(self, service):
        data = service.get_settings("whatsapp")
        assert data == {"endpoint": "", "bearer_token": ""}

    def test_whatsapp_falls_back_to_integrations(self, service):
        IntegrationSetting.objects.create(
            key=IntegrationSetting.INTEGRATIONS,
            data={"whatsapp": {"endpoint": "https://wa", "bearerToken": "tok"}},
        )
        data = service.get_settings("whatsapp")
        assert data == {"endpoint": "https://wa", "bearer_token": SECRET_MASK}

    def test_unknown_document(self, service):
        with pytest.raises(UnknownSettingsDocument):
            service.get_settings("integrations")


class TestUpdateSettings:
    def test_stores_snake_case(self, service):
        result = service.update_settings(
            "email",
            {
                "provider": "mailersend",
                "senderEmail": "suporte@tsmit.example.com",
                "apiKey": "mlsn.abc",
            },
        )

        stored = _stored("email")
        assert stored["provider"] == "mailersend"
        assert stored["sender_email"] == "suporte@tsmit.example.com"
        assert stored["api_key"] == "mlsn.abc"
        assert result["api_key"] == SECRET_MASK

    def test_mask_keeps_stored_secret(self, service, whatsapp_settings):
        service.update_settings(
            "whatsapp",
            {"endpoint": "https://wa.example.com/v2", "bearer_token": SECRET_MASK},
        )

        stored = _stored("whatsapp")
        assert stored["endpoint"] == "https://wa.example.com/v2"
        assert stored["bearer_token"] == "wa-token"

    def test_invalid_provider_is_rejected(self, service, email_settings):
        with pytest.raises(ValidationError):
            service.update_settings("email", {"provider": "carrier-pigeon"})
        assert _stored("email")["provider"] == "smtp"

    def test_invalid_port_is_rejected(self, service):
        with pytest.raises(ValidationError):
            service.update_settings("email", {"smtp_port": "abc"})
        assert not IntegrationSetting.objects.filter(key="email").exists()
