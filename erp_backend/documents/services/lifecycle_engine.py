"""
======================================================
PATH: documents/services/lifecycle_engine.py
======================================================
DOCUMENT LIFECYCLE ENGINE

The ONLY mutator of a document's state and side_effects_applied flag.

request_transition(kind, document_id, target_state, context):
1) load (tenant mismatch is reported as not found)
2) reject terminal documents
3) reject non-adjacent targets
4) reject when required signatures are missing
5) build the side-effect instruction and pre-check stock
6) compare-and-swap state + flag (+ notes) in one write
7) append the audit record and emit the instruction
8) return the reloaded document

Steps 1-7 run inside DocumentStore.atomic(). Any failure leaves
state and side_effects_applied exactly as they were.
The engine never retries.
======================================================
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional

from django.utils import timezone

from documents.domain import Document, LifecycleContext, TransitionRecord
from documents.services.exceptions import (
    AlreadyTerminal,
    ConcurrentModification,
    DocumentNotFound,
    InsufficientStock,
    MissingSignatures,
)
from documents.services.notes import append_note
from documents.services.side_effects import SideEffectInstruction, build_instruction
from documents.services.signature_policy import required_signers
from documents.services.transition_rules import (
    is_terminal,
    side_effect_state,
    validate_transition,
)
from documents.stores.base import (
    AuditLog,
    DocumentStore,
    SideEffectDispatcher,
    SignatureStore,
    StockGauge,
)

logger = logging.getLogger(__name__)


class LifecycleEngine:
    def __init__(
        self,
        *,
        documents: DocumentStore,
        signatures: SignatureStore,
        audit: AuditLog,
        dispatcher: SideEffectDispatcher,
        stock: StockGauge,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.documents = documents
        self.signatures = signatures
        self.audit = audit
        self.dispatcher = dispatcher
        self.stock = stock
        self.clock = clock or timezone.now

    # ======================================================
    # HELPERS
    # ======================================================

    def load_for_tenant(self, kind: str, document_id: uuid.UUID, tenant_id: str) -> Document:
        document = self.documents.load(kind, document_id)
        if document.tenant_id != tenant_id:
            raise DocumentNotFound()
        return document

    def _check_stock(self, instruction: SideEffectInstruction) -> None:
        for delta in instruction.decreases:
            available = int(self.stock.available(delta.product_id, delta.location_id))
            # equality is allowed
            if available < delta.quantity:
                raise InsufficientStock(available, delta.quantity)

    # ======================================================
    # TRANSITION
    # ======================================================

    def request_transition(
        self,
        kind: str,
        document_id: uuid.UUID,
        target_state: str,
        context: LifecycleContext,
    ) -> Document:
        with self.documents.atomic():
            document = self.load_for_tenant(kind, document_id, context.tenant_id)

            if is_terminal(kind, document.state):
                raise AlreadyTerminal(document.state)

            validate_transition(kind, document.state, target_state)

            required = required_signers(document, target_state)
            if required:
                missing = required - self.signatures.roles_for(kind, document.id)
                if missing:
                    raise MissingSignatures(missing)

            instruction = None
            if target_state == side_effect_state(kind) and not document.side_effects_applied:
                instruction = build_instruction(document, actor_id=context.actor_id)
                self._check_stock(instruction)

            now = self.clock()
            notes = None
            if (context.notes or "").strip():
                notes = append_note(document.notes, context.notes, now)

            swapped = self.documents.compare_and_swap(
                kind,
                document.id,
                expected_state=document.state,
                new_state=target_state,
                expected_side_effects_applied=document.side_effects_applied,
                side_effects_applied=document.side_effects_applied or instruction is not None,
                notes=notes,
                extra=context.extra,
                changed_at=now,
            )
            if not swapped:
                raise ConcurrentModification()

            self.audit.append(
                TransitionRecord(
                    document_kind=kind,
                    document_id=document.id,
                    from_state=document.state,
                    to_state=target_state,
                    timestamp=now,
                    tenant_id=document.tenant_id,
                    performed_by_id=context.actor_id,
                    notes=(context.notes or "").strip(),
                )
            )

            if instruction is not None:
                self.dispatcher.emit(instruction)

        logger.info(
            "Document transitioned",
            extra={
                "operation": "STATUS_CHANGED",
                "document_kind": kind,
                "document_id": str(document.id),
                "folio": document.folio,
                "from_state": document.state,
                "to_state": target_state,
                "side_effects": instruction is not None,
                "tenant_id": document.tenant_id,
            },
        )

        return self.documents.load(kind, document.id)

    def history(self, kind: str, document_id: uuid.UUID, tenant_id: str) -> list:
        self.load_for_tenant(kind, document_id, tenant_id)
        return self.audit.history(kind, document_id)
