"""Client and ProvidedService models.

Clients are consumed read-only by the service-order workflow:
- ``contracted_services`` is snapshotted onto each new service order.
- ``email`` / ``name`` are the preferred notification recipient.
- ``cnpj`` is stored as digits only and validated with *validate-docbr*.
"""

from __future__ import annotations

import re

import structlog
from validate_docbr import CNPJ

from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class ProvidedService(BaseModel):
    """An add-on service a client can contract (e.g. backup, EDR)."""

    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "provided_services"
        ordering = ["name"]

    def to_snapshot(self) -> dict:
        """Plain dict stored on a service order at creation time."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
        }

    def __str__(self) -> str:
        return self.name


class Client(BaseModel):
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, blank=True, default="")
    cnpj = models.CharField(max_length=14, blank=True, default="")
    address = models.TextField(blank=True, default="")
    contracted_services = models.ManyToManyField(
        ProvidedService,
        related_name="clients",
        blank=True,
    )

    class Meta:
        db_table = "clients"
        ordering = ["name"]

    @staticmethod
    def _sanitize_document(value: str) -> str:
        return re.sub(r"\D", "", value)

    def clean(self) -> None:
        super().clean()
        if not self.cnpj:
            return
        self.cnpj = self._sanitize_document(self.cnpj)
        if not CNPJ().validate(self.cnpj):
            logger.warning("client.invalid_cnpj", cnpj_suffix=self.cnpj[-4:])
            raise ValidationError({"cnpj": "Invalid CNPJ number."})

    def save(self, *args, **kwargs) -> None:
        if self.cnpj:
            self.cnpj = self._sanitize_document(self.cnpj)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name
