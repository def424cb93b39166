"""
Wiring for the ORM-backed engine and ledger.
"""

from __future__ import annotations

from documents.services.lifecycle_engine import LifecycleEngine
from documents.services.signature_ledger import SignatureLedger
from documents.stores.django_store import (
    DjangoAuditLog,
    DjangoDocumentStore,
    DjangoSignatureStore,
    DjangoStockGauge,
)
from inventory.services.dispatcher import InventorySideEffectDispatcher


def build_engine() -> LifecycleEngine:
    return LifecycleEngine(
        documents=DjangoDocumentStore(),
        signatures=DjangoSignatureStore(),
        audit=DjangoAuditLog(),
        dispatcher=InventorySideEffectDispatcher(),
        stock=DjangoStockGauge(),
    )


def build_signature_ledger() -> SignatureLedger:
    return SignatureLedger(store=DjangoSignatureStore())
