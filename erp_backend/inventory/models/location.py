# inventory/models/location.py

import uuid

from django.db import models


class Location(models.Model):
    """
    A place stock lives in: warehouse, plant, field, yard.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255)
    location_type = models.CharField(max_length=50, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "name"],
                name="uniq_location_name_per_tenant",
            ),
        ]

    def __str__(self):
        return self.name
