"""
In-process implementation of the lifecycle storage contracts.

One InMemoryStore plays DocumentStore, SignatureStore, AuditLog and
StockGauge at once. atomic() holds a re-entrant lock and restores the
previous contents when the outermost block raises.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional

from documents.domain import Document, SignatureRecord, TransitionRecord
from documents.services.exceptions import DocumentNotFound, InsufficientStock
from documents.services.side_effects import DecreaseInventory, SideEffectInstruction


class InMemoryStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self.documents: dict = {}
        self.signatures: dict = {}
        self.transitions: list = []
        self.stock: dict = {}
        self.emitted: list = []

    # --------------------------------------------------
    # unit of work
    # --------------------------------------------------

    def _snapshot(self):
        return (
            dict(self.documents),
            dict(self.signatures),
            list(self.transitions),
            dict(self.stock),
            list(self.emitted),
        )

    def _restore(self, snapshot) -> None:
        (
            self.documents,
            self.signatures,
            self.transitions,
            self.stock,
            self.emitted,
        ) = snapshot

    @contextmanager
    def atomic(self):
        with self._lock:
            snapshot = self._snapshot() if self._depth == 0 else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    # --------------------------------------------------
    # DocumentStore
    # --------------------------------------------------

    def add(self, document: Document) -> Document:
        with self._lock:
            self.documents[(document.kind, document.id)] = document
        return document

    def load(self, kind: str, document_id: uuid.UUID) -> Document:
        with self._lock:
            document = self.documents.get((kind, document_id))
        if document is None:
            raise DocumentNotFound()
        return document

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
        with self._lock:
            current = self.documents.get((kind, document_id))
            if current is None:
                return False
            if (
                current.state != expected_state
                or current.side_effects_applied != expected_side_effects_applied
            ):
                return False
            changes = {"state": new_state, "side_effects_applied": side_effects_applied}
            if notes is not None:
                changes["notes"] = notes
            self.documents[(kind, document_id)] = replace(current, **changes)
            return True

    # --------------------------------------------------
    # SignatureStore
    # --------------------------------------------------

    def insert_if_absent(self, record: SignatureRecord) -> bool:
        key = (record.document_kind, record.document_id, record.role)
        with self._lock:
            if key in self.signatures:
                return False
            self.signatures[key] = record
            return True

    def get(self, kind: str, document_id: uuid.UUID, role: str) -> Optional[SignatureRecord]:
        with self._lock:
            return self.signatures.get((kind, document_id, role))

    def roles_for(self, kind: str, document_id: uuid.UUID) -> frozenset:
        with self._lock:
            return frozenset(
                role for (k, d, role) in self.signatures if k == kind and d == document_id
            )

    def list_for(self, kind: str, document_id: uuid.UUID) -> list:
        with self._lock:
            records = [
                rec
                for (k, d, _role), rec in self.signatures.items()
                if k == kind and d == document_id
            ]
        return sorted(records, key=lambda r: r.captured_at)

    # --------------------------------------------------
    # AuditLog
    # --------------------------------------------------

    def append(self, record: TransitionRecord) -> None:
        with self._lock:
            self.transitions.append(record)

    def history(self, kind: str, document_id: uuid.UUID) -> list:
        with self._lock:
            return [
                r
                for r in self.transitions
                if r.document_kind == kind and r.document_id == document_id
            ]

    # --------------------------------------------------
    # StockGauge
    # --------------------------------------------------

    def set_stock(self, product_id: Any, location_id: Any, quantity: int) -> None:
        with self._lock:
            self.stock[(product_id, location_id)] = int(quantity)

    def available(self, product_id: Any, location_id: Any) -> int:
        with self._lock:
            return int(self.stock.get((product_id, location_id), 0))


class RecordingDispatcher:
    """
    Applies inventory deltas to an InMemoryStore and records every
    instruction it receives.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store

    @property
    def emitted(self) -> list:
        return self.store.emitted

    def emit(self, instruction: SideEffectInstruction) -> None:
        with self.store.atomic():
            for delta in instruction.inventory:
                key = (delta.product_id, delta.location_id)
                current = self.store.stock.get(key, 0)
                if isinstance(delta, DecreaseInventory):
                    if current < delta.quantity:
                        raise InsufficientStock(current, delta.quantity)
                    self.store.stock[key] = current - delta.quantity
                else:
                    self.store.stock[key] = current + delta.quantity
            self.store.emitted.append(instruction)
