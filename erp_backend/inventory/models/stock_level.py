# inventory/models/stock_level.py

"""
On-hand quantity per (product, location).

RULES:
- one row per pair
- quantity never negative
- written ONLY by inventory.services.stock under row lock
"""

from django.db import models

from .location import Location
from .product import Product


class StockLevel(models.Model):
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_levels"
    )
    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="stock_levels"
    )

    quantity = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-quantity"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "location"],
                name="uniq_stock_level_product_location",
            ),
        ]

    def __str__(self):
        return f"{self.product_id}@{self.location_id}: {self.quantity}"
