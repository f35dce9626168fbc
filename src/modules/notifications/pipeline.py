"""Notification dispatch pipeline.

For every channel the target status enables, the stages run in order::

    resolve_recipient -> load_settings -> render -> deliver

preceded by a template check, so a status without a body for the channel
always reports ``TemplateMissing`` (stage ``render``) whatever else is
missing.

A failing stage stops that channel only. The failure is reported as a
``NotificationOutcome`` and never propagates to the caller, so a broken
integration cannot undo or block a status change.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, List, Optional, Sequence

import httpx
import structlog

from modules.notifications.channels import EmailChannel, WhatsappChannel
from modules.notifications.dtos import NotificationOutcome
from modules.notifications.exceptions import NotificationError
from modules.notifications.templates import build_variables

if TYPE_CHECKING:
    from modules.notifications.channels.base import NotificationChannel
    from modules.notifications.dtos import NotificationSubject
    from modules.notifications.repositories.interfaces import ISettingsRepository
    from modules.statuses.dtos import StatusDTO

logger = structlog.get_logger(__name__)


class NotificationPipeline:
    def __init__(self, channels: Sequence[NotificationChannel]) -> None:
        self._channels = list(channels)

    @classmethod
    def default(
        cls,
        settings_repository: ISettingsRepository,
        http_client: Optional[httpx.Client] = None,
    ) -> NotificationPipeline:
        """Email then WhatsApp, sharing one settings repository."""
        return cls(
            [
                EmailChannel(settings_repository, http_client=http_client),
                WhatsappChannel(settings_repository, http_client=http_client),
            ]
        )

    def dispatch(
        self,
        subject: NotificationSubject,
        status: StatusDTO,
        today: Optional[date] = None,
    ) -> List[NotificationOutcome]:
        """Run every channel enabled by ``status``; one outcome per channel."""
        enabled = [c for c in self._channels if c.enabled_for(status)]
        if not enabled:
            return []
        variables = build_variables(subject, status, today=today)
        return [self._run(channel, subject, status, variables) for channel in enabled]

    def _run(
        self,
        channel: NotificationChannel,
        subject: NotificationSubject,
        status: StatusDTO,
        variables: dict,
    ) -> NotificationOutcome:
        log = logger.bind(
            channel=channel.name,
            order_id=subject.order_id,
            order_number=subject.order_number,
            status_id=status.id,
        )
        try:
            channel.check_template(status)
            recipient = channel.resolve_recipient(subject)
            config = channel.load_settings()
            message = channel.render(subject, status, variables, recipient)
            channel.deliver(recipient, message, config)
        except NotificationError as exc:
            log.warning(
                "notification.failed",
                stage=exc.stage,
                error_type=type(exc).__name__,
                reason=str(exc),
            )
            return NotificationOutcome(
                channel=channel.name,
                sent=False,
                reason=str(exc),
                stage=exc.stage,
            )

        log.info("notification.sent")
        return NotificationOutcome(channel=channel.name, sent=True)
