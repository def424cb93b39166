# documents/models/base.py

"""
ABSTRACT LIFECYCLE DOCUMENT

Common columns for sales, purchases and transfers.

RULES:
- status and side_effects_applied are written ONLY by the lifecycle
  engine (documents.stores.django_store compare-and-swap)
- quantity / prices are set at creation and never change
- notes is an append-only log
"""

import uuid

from django.conf import settings
from django.db import models

from documents.choices import DocumentState
from documents.domain import Document


class LifecycleDocument(models.Model):
    document_kind = ""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    folio = models.CharField(max_length=32, db_index=True)

    status = models.CharField(
        max_length=20,
        choices=DocumentState.choices,
        db_index=True,
    )
    side_effects_applied = models.BooleanField(default=False)

    quantity = models.PositiveIntegerField()
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def to_document(self) -> Document:
        raise NotImplementedError

    def __str__(self):
        return f"{self.folio} ({self.status})"
