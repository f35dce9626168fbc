"""Channel contract for the notification pipeline.

A channel first checks that the status has a body template, then runs four
stages in order; each either returns its result or raises a
``NotificationError`` subclass naming the failed stage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
from django.conf import settings

from modules.notifications.exceptions import ChannelNotConfigured, TransportError
from modules.notifications.templates import require_template

if TYPE_CHECKING:
    from modules.notifications.dtos import (
        NotificationSubject,
        Recipient,
        RenderedMessage,
    )
    from modules.notifications.repositories.interfaces import ISettingsRepository
    from modules.statuses.dtos import StatusDTO


class NotificationChannel(ABC):
    name: str = ""
    template_field: str = ""
    template_label: str = ""

    def __init__(
        self,
        settings_repository: ISettingsRepository,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self._settings_repo = settings_repository
        self._http_client = http_client

    @abstractmethod
    def enabled_for(self, status: StatusDTO) -> bool:
        """Whether entering ``status`` triggers this channel."""

    def check_template(self, status: StatusDTO) -> None:
        """Raises ``TemplateMissing`` when ``status`` has no body for this channel."""
        require_template(
            getattr(status, self.template_field), status, self.template_label
        )

    @abstractmethod
    def resolve_recipient(self, subject: NotificationSubject) -> Recipient: ...

    @abstractmethod
    def load_settings(self) -> Any: ...

    @abstractmethod
    def render(
        self,
        subject: NotificationSubject,
        status: StatusDTO,
        variables: Dict[str, str],
        recipient: Recipient,
    ) -> RenderedMessage: ...

    @abstractmethod
    def deliver(
        self, recipient: Recipient, message: RenderedMessage, config: Any
    ) -> None: ...

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _document(self, key: str) -> Dict[str, Any]:
        document = self._settings_repo.get_document(key)
        if not document:
            raise ChannelNotConfigured(f"Settings document '{key}' not found.")
        return document

    def _post_json(
        self, url: str, payload: Dict[str, Any], headers: Dict[str, str]
    ) -> httpx.Response:
        """Single POST attempt; any HTTP failure becomes ``TransportError``."""
        try:
            if self._http_client is not None:
                response = self._http_client.post(url, json=payload, headers=headers)
            else:
                with httpx.Client(timeout=settings.NOTIFICATION_HTTP_TIMEOUT) as client:
                    response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"{self.name} request failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"{self.name} provider answered HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )
        return response
