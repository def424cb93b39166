# documents/models/transition.py

"""
TRANSITION AUDIT LOG

Immutable record of every accepted state change.

GUARANTEES:
- Append-only (no updates, no deletes)
- Written in the same transaction as the state change it describes
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from documents.choices import DocumentKind, DocumentState
from documents.domain import TransitionRecord


class DocumentTransition(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    document_kind = models.CharField(max_length=20, choices=DocumentKind.choices)
    document_id = models.UUIDField()

    from_state = models.CharField(max_length=20, choices=DocumentState.choices)
    to_state = models.CharField(max_length=20, choices=DocumentState.choices)

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="document_transitions",
    )
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["document_kind", "document_id", "created_at"],
                name="documents_d_documen_trn_idx",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("DocumentTransition records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "DocumentTransition records are immutable and cannot be deleted"
        )

    def to_record(self) -> TransitionRecord:
        return TransitionRecord(
            document_kind=self.document_kind,
            document_id=self.document_id,
            from_state=self.from_state,
            to_state=self.to_state,
            timestamp=self.created_at,
            tenant_id=self.tenant_id,
            performed_by_id=self.performed_by_id,
            notes=self.notes,
        )

    def __str__(self):
        return f"{self.document_kind}:{self.document_id} {self.from_state} -> {self.to_state}"
