"""
Storage contracts the lifecycle engine depends on.

Two implementations exist:
- documents.stores.django_store (ORM, production)
- documents.stores.memory (in-process, tests)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, ContextManager, Mapping, Optional, Protocol

from documents.domain import Document, SignatureRecord, TransitionRecord


class DocumentStore(Protocol):
    def atomic(self) -> ContextManager:
        """Unit of work. Everything inside commits or rolls back together."""

    def load(self, kind: str, document_id: uuid.UUID) -> Document:
        """Raise DocumentNotFound when absent."""

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
        """Write state + flag (+ notes/extra) only if both still match."""


class SignatureStore(Protocol):
    def insert_if_absent(self, record: SignatureRecord) -> bool: ...

    def get(self, kind: str, document_id: uuid.UUID, role: str) -> Optional[SignatureRecord]: ...

    def roles_for(self, kind: str, document_id: uuid.UUID) -> frozenset: ...

    def list_for(self, kind: str, document_id: uuid.UUID) -> list: ...


class AuditLog(Protocol):
    def append(self, record: TransitionRecord) -> None: ...

    def history(self, kind: str, document_id: uuid.UUID) -> list: ...


class SideEffectDispatcher(Protocol):
    def emit(self, instruction) -> None: ...


class StockGauge(Protocol):
    def available(self, product_id: Any, location_id: Any) -> int: ...
