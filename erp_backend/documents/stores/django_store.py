"""
======================================================
PATH: documents/stores/django_store.py
======================================================
ORM-BACKED LIFECYCLE STORES

- compare_and_swap is a single conditional UPDATE on
  (status, side_effects_applied); zero rows updated means the race was lost
- signature inserts run in a savepoint and rely on the unique
  (document_kind, document_id, role) constraint
- atomic() is transaction.atomic(), so audit rows and dispatched
  side effects commit or roll back with the state change
======================================================
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Mapping, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from documents.domain import Document, SignatureRecord, TransitionRecord
from documents.models import DocumentSignature, DocumentTransition
from documents.registry import binding_for, document_model
from documents.services.exceptions import DocumentNotFound
from inventory.services.stock import available_quantity


class DjangoDocumentStore:
    def atomic(self):
        return transaction.atomic()

    def load(self, kind: str, document_id: uuid.UUID) -> Document:
        model = document_model(kind)
        try:
            instance = model.objects.get(pk=document_id)
        except (model.DoesNotExist, ValidationError, ValueError):
            raise DocumentNotFound()
        return instance.to_document()

    def compare_and_swap(
        self,
        kind: str,
        document_id: uuid.UUID,
        *,
        expected_state: str,
        new_state: str,
        expected_side_effects_applied: bool,
        side_effects_applied: bool,
        notes: Optional[str] = None,
        extra: Optional[Mapping[str, Any]] = None,
        changed_at: Optional[datetime] = None,
    ) -> bool:
        binding = binding_for(kind)
        model = document_model(kind)
        now = changed_at or timezone.now()

        updates = {
            "status": new_state,
            "side_effects_applied": side_effects_applied,
            "updated_at": now,
        }
        if notes is not None:
            updates["notes"] = notes

        stamp_field = binding.stage_timestamps.get(new_state)
        if stamp_field:
            updates[stamp_field] = now

        for name, value in (extra or {}).items():
            if name not in binding.extra_fields:
                raise ValueError(f"Field '{name}' cannot be written on {kind} transitions.")
            updates[name] = value

        rows = model.objects.filter(
            pk=document_id,
            status=expected_state,
            side_effects_applied=expected_side_effects_applied,
        ).update(**updates)
        return rows == 1


class DjangoSignatureStore:
    def insert_if_absent(self, record: SignatureRecord) -> bool:
        try:
            with transaction.atomic():
                DocumentSignature.objects.create(
                    tenant_id=record.tenant_id,
                    document_kind=record.document_kind,
                    document_id=record.document_id,
                    role=record.role,
                    image_data=record.image_data,
                    location=record.location,
                    face_auth_data=record.face_auth_data,
                    captured_by_id=record.captured_by_id,
                    captured_at=record.captured_at,
                )
        except IntegrityError:
            return False
        return True

    def get(self, kind: str, document_id: uuid.UUID, role: str) -> Optional[SignatureRecord]:
        row = DocumentSignature.objects.filter(
            document_kind=kind, document_id=document_id, role=role
        ).first()
        return row.to_record() if row else None

    def roles_for(self, kind: str, document_id: uuid.UUID) -> frozenset:
        return frozenset(
            DocumentSignature.objects.filter(
                document_kind=kind, document_id=document_id
            ).values_list("role", flat=True)
        )

    def list_for(self, kind: str, document_id: uuid.UUID) -> list:
        return [
            row.to_record()
            for row in DocumentSignature.objects.filter(
                document_kind=kind, document_id=document_id
            ).order_by("captured_at")
        ]


class DjangoAuditLog:
    def append(self, record: TransitionRecord) -> None:
        DocumentTransition.objects.create(
            tenant_id=record.tenant_id,
            document_kind=record.document_kind,
            document_id=record.document_id,
            from_state=record.from_state,
            to_state=record.to_state,
            performed_by_id=record.performed_by_id,
            notes=record.notes,
            created_at=record.timestamp,
        )

    def history(self, kind: str, document_id: uuid.UUID) -> list:
        return [
            row.to_record()
            for row in DocumentTransition.objects.filter(
                document_kind=kind, document_id=document_id
            ).order_by("created_at")
        ]


class DjangoStockGauge:
    def available(self, product_id: Any, location_id: Any) -> int:
        return available_quantity(product_id=product_id, location_id=location_id)
