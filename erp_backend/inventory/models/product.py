# inventory/models/product.py

import uuid
from decimal import Decimal

from django.db import models


class Product(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    sku = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    unit = models.CharField(max_length=20, default="kg")

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "sku"],
                name="uniq_product_sku_per_tenant",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"
