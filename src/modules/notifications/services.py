"""Integration settings service.

Reads and replaces the ``email`` and ``whatsapp`` settings documents the
notification channels load. Documents are validated through
``EmailSettings`` / ``WhatsappSettings`` and stored in snake_case.

Secrets never leave the service in clear text: reads replace them with
``SECRET_MASK``, and a write that sends the mask back keeps the stored value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Tuple, Type

import structlog
from django.db import transaction
from pydantic import BaseModel

from modules.notifications.dtos import EmailSettings, WhatsappSettings
from modules.notifications.exceptions import UnknownSettingsDocument
from modules.notifications.models import IntegrationSetting

if TYPE_CHECKING:
    from modules.notifications.repositories.interfaces import ISettingsRepository

logger = structlog.get_logger(__name__)

SECRET_MASK = "********"

_DOCUMENTS: Dict[str, Tuple[Type[BaseModel], Tuple[str, ...]]] = {
    IntegrationSetting.EMAIL: (EmailSettings, ("smtp_password", "api_key")),
    IntegrationSetting.WHATSAPP: (WhatsappSettings, ("bearer_token",)),
}


class IntegrationSettingsService:
    """Receives an ``ISettingsRepository`` via constructor injection."""

    def __init__(self, repository: ISettingsRepository) -> None:
        self._repo = repository

    def get_settings(self, key: str) -> Dict[str, Any]:
        """Return the effective document for ``key`` with secrets masked.

        Raises:
            UnknownSettingsDocument: ``key`` is not an editable document.
        """
        schema, secrets = self._schema(key)
        return self._masked(self._current(key, schema), secrets)

    @transaction.atomic
    def update_settings(self, key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and replace the document for ``key``.

        Raises:
            UnknownSettingsDocument: ``key`` is not an editable document.
            pydantic.ValidationError: the payload does not fit the schema.
        """
        schema, secrets = self._schema(key)
        current = self._current(key, schema)

        data = dict(payload)
        for name in secrets:
            if data.get(name) == SECRET_MASK:
                data[name] = getattr(current, name)

        document = schema.model_validate(data)
        self._repo.save_document(key, document.model_dump(mode="json"))
        logger.info(
            "integration_settings.updated",
            key=key,
            fields=sorted(schema.model_fields),
            missing=document.missing_fields(),
        )
        return self._masked(document, secrets)

    # ------------------------------------------------------------------

    @staticmethod
    def _schema(key: str) -> Tuple[Type[BaseModel], Tuple[str, ...]]:
        try:
            return _DOCUMENTS[key]
        except KeyError:
            raise UnknownSettingsDocument(
                f"Unknown settings document: {key}."
            ) from None

    def _current(self, key: str, schema: Type[BaseModel]) -> BaseModel:
        document = self._repo.get_document(key)
        if not document and key == IntegrationSetting.WHATSAPP:
            integrations = (
                self._repo.get_document(IntegrationSetting.INTEGRATIONS) or {}
            )
            document = integrations.get("whatsapp")
        return schema.model_validate(document or {})

    @staticmethod
    def _masked(document: BaseModel, secrets: Tuple[str, ...]) -> Dict[str, Any]:
        data = document.model_dump(mode="json")
        for name in secrets:
            data[name] = SECRET_MASK if data.get(name) else ""
        return data
