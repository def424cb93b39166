# inventory/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- Created ONCE, never edited
- Movement direction validated against reason
- Document-driven movements must reference their document
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .location import Location
from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        SALE = "SALE", "Sale"
        PURCHASE = "PURCHASE", "Purchase"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    REASON_TO_MOVEMENT = {
        Reason.PURCHASE: MovementType.IN,
        Reason.TRANSFER_IN: MovementType.IN,
        Reason.SALE: MovementType.OUT,
        Reason.TRANSFER_OUT: MovementType.OUT,
        Reason.ADJUSTMENT: None,
    }

    DOCUMENT_REASONS = {
        Reason.SALE,
        Reason.PURCHASE,
        Reason.TRANSFER_IN,
        Reason.TRANSFER_OUT,
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )
    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.PositiveIntegerField()

    document_kind = models.CharField(max_length=20, blank=True, default="")
    document_id = models.UUIDField(null=True, blank=True)
    note = models.CharField(max_length=255, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["reason"], name="inventory_s_reason_idx"),
            models.Index(
                fields=["product", "location", "created_at"],
                name="inventory_s_prod_loc_idx",
            ),
            models.Index(
                fields=["document_kind", "document_id"],
                name="inventory_s_document_idx",
            ),
        ]

    def clean(self):
        if not self.quantity or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and self.movement_type != expected_type:
            raise ValidationError(
                f"{self.reason} requires movement_type={expected_type}"
            )

        if self.reason in self.DOCUMENT_REASONS and not self.document_id:
            raise ValidationError(f"{self.reason} must reference a document")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
