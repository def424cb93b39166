# documents/models/signature.py

"""
SIGNATURE LEDGER ROW

GUARANTEES:
- One row per (document_kind, document_id, role), enforced by the database
- Append-only (no updates, no deletes)
- face_auth_data is stored opaque, never interpreted
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from documents.choices import DocumentKind, SignerRole
from documents.domain import SignatureRecord


class DocumentSignature(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.CharField(max_length=64, db_index=True)
    document_kind = models.CharField(max_length=20, choices=DocumentKind.choices)
    document_id = models.UUIDField()
    role = models.CharField(max_length=20, choices=SignerRole.choices)

    image_data = models.TextField()
    location = models.JSONField(null=True, blank=True)
    face_auth_data = models.JSONField(null=True, blank=True)

    captured_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="document_signatures",
    )
    captured_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["captured_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["document_kind", "document_id", "role"],
                name="uniq_signature_per_document_role",
            ),
        ]
        indexes = [
            models.Index(
                fields=["document_kind", "document_id"],
                name="documents_d_documen_sig_idx",
            ),
        ]

    def clean(self):
        if not (self.image_data or "").strip():
            raise ValidationError("image_data is required")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("DocumentSignature records are immutable")

        # uniqueness is left to the database constraint
        self.full_clean(validate_unique=False, validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "DocumentSignature records are immutable and cannot be deleted"
        )

    def to_record(self) -> SignatureRecord:
        return SignatureRecord(
            document_kind=self.document_kind,
            document_id=self.document_id,
            role=self.role,
            image_data=self.image_data,
            captured_at=self.captured_at,
            tenant_id=self.tenant_id,
            captured_by_id=self.captured_by_id,
            location=self.location,
            face_auth_data=self.face_auth_data,
        )

    def __str__(self):
        return f"{self.document_kind}:{self.document_id} | {self.role}"
