"""Email channel.

Two providers, chosen by ``provider`` in the ``email`` settings document:

- ``smtp`` (default): Django mail with a connection built from the document.
- ``mailersend``: the provider's HTTP API via httpx.
"""

from __future__ import annotations

import smtplib
from email.utils import formataddr
from typing import TYPE_CHECKING, Dict

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from pydantic import ValidationError as PydanticValidationError

from modules.notifications.channels.base import NotificationChannel
from modules.notifications.dtos import EmailProvider, EmailSettings, Recipient
from modules.notifications.exceptions import (
    ChannelNotConfigured,
    RecipientMissing,
    TransportError,
)
from modules.notifications.models import IntegrationSetting
from modules.notifications.templates import render_email

if TYPE_CHECKING:
    from modules.notifications.dtos import NotificationSubject, RenderedMessage
    from modules.statuses.dtos import StatusDTO


class EmailChannel(NotificationChannel):
    name = "email"
    template_field = "email_body"
    template_label = "email"

    def enabled_for(self, status: StatusDTO) -> bool:
        return status.triggers_email

    def resolve_recipient(self, subject: NotificationSubject) -> Recipient:
        """Client email first, collaborator email otherwise."""
        address = subject.client_email or subject.collaborator_email
        if not address:
            raise RecipientMissing("Neither client nor collaborator has an email.")
        name = subject.client_name or subject.collaborator_name
        return Recipient(address=address, name=name)

    def load_settings(self) -> EmailSettings:
        document = self._document(IntegrationSetting.EMAIL)
        try:
            config = EmailSettings.model_validate(document)
        except PydanticValidationError as exc:
            raise ChannelNotConfigured(f"Invalid email settings: {exc}") from exc
        missing = config.missing_fields()
        if missing:
            raise ChannelNotConfigured(f"Email settings missing: {', '.join(missing)}.")
        return config

    def render(
        self,
        subject: NotificationSubject,
        status: StatusDTO,
        variables: Dict[str, str],
        recipient: Recipient,
    ) -> RenderedMessage:
        return render_email(subject, status, variables, recipient_name=recipient.name)

    def deliver(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        config: EmailSettings,
    ) -> None:
        if config.provider == EmailProvider.MAILERSEND:
            self._deliver_mailersend(recipient, message, config)
        else:
            self._deliver_smtp(recipient, message, config)

    def _deliver_smtp(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        config: EmailSettings,
    ) -> None:
        connection = get_connection(
            host=config.smtp_server,
            port=config.port,
            username=config.sender_email,
            password=config.smtp_password,
            use_tls=config.use_tls,
            use_ssl=config.use_ssl,
            timeout=settings.NOTIFICATION_HTTP_TIMEOUT,
        )
        mail = EmailMultiAlternatives(
            subject=message.subject,
            body=message.text,
            from_email=formataddr((settings.EMAIL_SENDER_NAME, config.sender_email)),
            to=[formataddr((recipient.name, recipient.address))],
            connection=connection,
        )
        mail.attach_alternative(message.body, "text/html")
        try:
            mail.send(fail_silently=False)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery failed: {exc}") from exc

    def _deliver_mailersend(
        self,
        recipient: Recipient,
        message: RenderedMessage,
        config: EmailSettings,
    ) -> None:
        payload = {
            "from": {
                "email": config.sender_email,
                "name": settings.EMAIL_SENDER_NAME,
            },
            "to": [{"email": recipient.address, "name": recipient.name}],
            "subject": message.subject,
            "html": message.body,
            "text": message.text,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }
        self._post_json(settings.MAILERSEND_API_URL, payload, headers)
