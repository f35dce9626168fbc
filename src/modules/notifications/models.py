"""Integration settings documents.

Each row is a JSON document addressed by ``key``:

- ``email``: provider and credentials for outgoing email.
- ``whatsapp``: webhook ``endpoint`` and ``bearer_token``.
- ``integrations``: legacy container whose ``whatsapp`` entry is used
  when the ``whatsapp`` document is absent.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class IntegrationSetting(BaseModel):
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    INTEGRATIONS = "integrations"

    KEY_CHOICES = [
        (EMAIL, "Email"),
        (WHATSAPP, "WhatsApp"),
        (INTEGRATIONS, "Integrations"),
    ]

    key = models.CharField(max_length=50, unique=True, choices=KEY_CHOICES)
    data = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "integration_settings"
        ordering = ["key"]

    def __str__(self) -> str:
        return self.key
