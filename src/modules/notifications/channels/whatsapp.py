"""WhatsApp channel: plain-text body posted to a webhook endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict

from pydantic import ValidationError as PydanticValidationError

from modules.core.phones import sanitize_phone
from modules.notifications.channels.base import NotificationChannel
from modules.notifications.dtos import Recipient, WhatsappSettings
from modules.notifications.exceptions import ChannelNotConfigured, RecipientMissing
from modules.notifications.models import IntegrationSetting
from modules.notifications.templates import render_whatsapp

if TYPE_CHECKING:
    from modules.notifications.dtos import NotificationSubject, RenderedMessage
    from modules.statuses.dtos import StatusDTO


class WhatsappChannel(NotificationChannel):
    name = "whatsapp"
    template_field = "whatsapp_body"
    template_label = "WhatsApp"

    def enabled_for(self, status: StatusDTO) -> bool:
        return status.triggers_whatsapp

    def resolve_recipient(self, subject: NotificationSubject) -> Recipient:
        number = sanitize_phone(subject.collaborator_phone)
        if not number:
            raise RecipientMissing("Order has no collaborator phone number.")
        return Recipient(address=number, name=subject.collaborator_name)

    def load_settings(self) -> WhatsappSettings:
        """The ``whatsapp`` document wins over ``integrations.whatsapp``."""
        document = self._settings_repo.get_document(IntegrationSetting.WHATSAPP)
        if not document:
            integrations = (
                self._settings_repo.get_document(IntegrationSetting.INTEGRATIONS) or {}
            )
            document = integrations.get("whatsapp") or {}
        if not document:
            raise ChannelNotConfigured("WhatsApp integration is not configured.")
        try:
            config = WhatsappSettings.model_validate(document)
        except PydanticValidationError as exc:
            raise ChannelNotConfigured(f"Invalid WhatsApp settings: {exc}") from exc
        missing = config.missing_fields()
        if missing:
            raise ChannelNotConfigured(
                f"WhatsApp settings missing: {', '.join(missing)}."
            )
        return config

    def render(
        self,
        subject: NotificationSubject,
        status: StatusDTO,
        variables: Dict[str, str],
        recipient: Recipient,
    ) -> RenderedMessage:
        return render_whatsapp(status, variables)

    def deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        config: WhatsappSettings,
    ) -> None:
        payload = {
            "number": recipient.address,
            "body": message.body,
            "userId": "",
            "queueId": "",
            "sendSignature": False,
            "closeTicket": False,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.bearer_token}",
        }
        self._post_json(config.endpoint, payload, headers)
