"""Status model: one node of the configurable service-order workflow.

Business rules implemented:
- Statuses flagged ``is_initial`` are the only valid starting points.
- ``allowed_next_statuses`` / ``allowed_previous_statuses`` are directed
  edges (non-symmetrical); a backward edge is tagged as such by the
  transition validator.
- ``triggers_email`` / ``triggers_whatsapp`` enable the notification
  channels when an order enters the status.
- Blank template fields mean "not configured".
"""

from __future__ import annotations

from django.core.validators import RegexValidator
from django.db import models

from modules.core.models import BaseModel

COLOR_VALIDATOR = RegexValidator(
    regex=r"^#[0-9A-Fa-f]{6}$",
    message="Color must be a hex value like #RRGGBB.",
)


class Status(BaseModel):
    name = models.CharField(max_length=100)
    order = models.PositiveIntegerField(default=1)
    color = models.CharField(
        max_length=7, default="#808080", validators=[COLOR_VALIDATOR]
    )
    icon = models.CharField(max_length=50, blank=True, default="")

    is_initial = models.BooleanField(default=False)
    is_final = models.BooleanField(default=False)
    is_pickup_status = models.BooleanField(default=False)
    triggers_email = models.BooleanField(default=False)
    triggers_whatsapp = models.BooleanField(default=False)

    email_subject = models.CharField(max_length=255, blank=True, default="")
    email_body = models.TextField(blank=True, default="")
    whatsapp_body = models.TextField(blank=True, default="")

    allowed_next_statuses = models.ManyToManyField(
        "self", symmetrical=False, related_name="+", blank=True
    )
    allowed_previous_statuses = models.ManyToManyField(
        "self", symmetrical=False, related_name="+", blank=True
    )

    class Meta:
        db_table = "statuses"
        ordering = ["order", "name"]
        permissions = [
            (
                "override_transition",
                "Can move a service order to any status",
            ),
        ]

    def __str__(self) -> str:
        return self.name
