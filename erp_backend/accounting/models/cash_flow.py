# accounting/models/cash_flow.py

"""
======================================================
PATH: accounting/models/cash_flow.py
======================================================
CASH FLOW ENTRY

One money movement caused by a business document.

Guarantees:
- Immutable once created (no updates, no deletes)
- Sign follows direction: ingreso > 0, egreso < 0
- Every entry references the document that produced it
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class CashFlowEntry(models.Model):
    class MovementType(models.TextChoices):
        INGRESO = "ingreso", "Ingreso"
        EGRESO = "egreso", "Egreso"

    class SourceType(models.TextChoices):
        VENTA = "venta", "Venta"
        COMPRA = "compra", "Compra"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Signed value: positive for ingreso, negative for egreso",
    )
    movement_type = models.CharField(max_length=10, choices=MovementType.choices)
    source_type = models.CharField(max_length=10, choices=SourceType.choices)

    reference_type = models.CharField(max_length=20)
    reference_id = models.UUIDField()

    description = models.CharField(max_length=255, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_flow_entries",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Cash Flow Entry"
        verbose_name_plural = "Cash Flow Entries"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant_id", "created_at"], name="accounting_c_tenant_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="accounting_c_ref_idx"),
        ]

    def __str__(self):
        return f"{self.movement_type} {self.amount} ({self.reference_type})"

    def clean(self):
        if self.amount is None or Decimal(self.amount) == 0:
            raise ValidationError("amount cannot be zero")

        if self.movement_type == self.MovementType.INGRESO and self.amount < 0:
            raise ValidationError("ingreso amounts must be positive")

        if self.movement_type == self.MovementType.EGRESO and self.amount > 0:
            raise ValidationError("egreso amounts must be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("CashFlowEntry records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "CashFlowEntry records are immutable and cannot be deleted"
        )
