"""ServiceOrder, its audit trails and the order-number counter.

Business rules implemented:
- ``order_number`` (``OS-001``...) comes from ``OrderNumberSequence``,
  incremented under a row lock.
- ``status_id`` is a plain reference resolved through the status registry;
  a dangling id is shown as the "unknown" status rather than failing.
- ``contracted_services`` is a snapshot of the client's services taken at
  creation and never synced afterwards.
- ``ServiceOrderLog`` / ``ServiceOrderEditLog`` rows are insert-only.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from typing import Any

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.exceptions import AuditLogImmutable


class ServiceOrder(SoftDeleteModel):
    order_number = models.CharField(max_length=20, unique=True, editable=False)
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.SET_NULL,
        null=True,
        related_name="service_orders",
    )
    collaborator = models.JSONField(default=dict, blank=True)
    equipment = models.JSONField(default=dict, blank=True)
    reported_problem = models.TextField()
    analyst = models.CharField(max_length=255, blank=True, default="")
    status_id = models.CharField(max_length=36, db_index=True)
    technical_solution = models.TextField(blank=True, default="")
    attachments = models.JSONField(default=list, blank=True)
    contracted_services = models.JSONField(default=list, blank=True)
    confirmed_service_ids = models.JSONField(default=list, blank=True)

    class Meta:
        db_table = "service_orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="service_orders_created_idx"),
        ]

    @property
    def contracted_service_ids(self) -> set[str]:
        return {str(s.get("id")) for s in self.contracted_services if s.get("id")}

    def __str__(self) -> str:
        return self.order_number


class AppendOnlyModel(BaseModel):
    """Rows can be inserted but never updated or deleted through the ORM."""

    class Meta:
        abstract = True

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise AuditLogImmutable(f"{self._meta.label} entries cannot be changed.")
        super().save(*args, **kwargs)

    def delete(self, using=None, keep_parents=False):
        raise AuditLogImmutable(f"{self._meta.label} entries cannot be deleted.")


class ServiceOrderLog(AppendOnlyModel):
    """One status movement (creation is logged as ``from == to``)."""

    order = models.ForeignKey(
        ServiceOrder, on_delete=models.CASCADE, related_name="logs"
    )
    timestamp = models.DateTimeField(default=timezone.now)
    responsible = models.CharField(max_length=255)
    from_status = models.CharField(max_length=36)
    to_status = models.CharField(max_length=36)
    observation = models.TextField(blank=True, default="")

    class Meta:
        db_table = "service_order_logs"
        ordering = ["timestamp", "id"]

    def __str__(self) -> str:
        return f"{self.from_status} -> {self.to_status}"


class ServiceOrderEditLog(AppendOnlyModel):
    """One detail edit; ``changes`` is a list of ``{field, old_value, new_value}``."""

    order = models.ForeignKey(
        ServiceOrder, on_delete=models.CASCADE, related_name="edit_logs"
    )
    timestamp = models.DateTimeField(default=timezone.now)
    responsible = models.CharField(max_length=255)
    observation = models.TextField(blank=True, default="")
    changes = models.JSONField(default=list)

    class Meta:
        db_table = "service_order_edit_logs"
        ordering = ["timestamp", "id"]


class OrderNumberSequence(models.Model):
    name = models.CharField(max_length=50, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_number_sequences"

    def __str__(self) -> str:
        return f"{self.name}={self.last_value}"
