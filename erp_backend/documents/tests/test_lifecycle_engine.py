# documents/tests/test_lifecycle_engine.py

"""
Engine behaviour against the in-memory stores.

No database: these tests pin down ordering of checks, atomicity
and exactly-once side effects independently of the ORM adapters.
"""

import threading
import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase

from documents.domain import Document, LifecycleContext
from documents.services.exceptions import (
    AlreadyTerminal,
    ConcurrentModification,
    DocumentNotFound,
    IllegalTransition,
    InsufficientStock,
    MissingSignatures,
)
from documents.services.lifecycle_engine import LifecycleEngine
from documents.services.signature_ledger import SignatureLedger
from documents.services.signing import sign_document
from documents.stores.memory import InMemoryStore, RecordingDispatcher

PNG = b"\x89PNG\r\n\x1a\n" + b"\x01" * 8
FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=dt_timezone.utc)

WAREHOUSE_A = "loc-a"
WAREHOUSE_B = "loc-b"
PRODUCT = "prod-1"


class FailingDispatcher:
    def emit(self, instruction):
        raise RuntimeError("downstream unavailable")


class StaleStore(InMemoryStore):
    """Every compare-and-swap loses the race."""

    def compare_and_swap(self, kind, document_id, **kwargs):
        return False


def _engine(store, dispatcher=None):
    return LifecycleEngine(
        documents=store,
        signatures=store,
        audit=store,
        dispatcher=dispatcher if dispatcher is not None else RecordingDispatcher(store),
        stock=store,
        clock=lambda: FIXED_NOW,
    )


def _doc(kind, state, **overrides):
    values = dict(
        id=uuid.uuid4(),
        kind=kind,
        state=state,
        tenant_id="t1",
        folio=f"{kind[:4].upper()}-20250301-00001",
        product_id=PRODUCT,
        quantity=10,
        location_id=WAREHOUSE_A,
        unit_price=Decimal("12.50"),
        total_amount=Decimal("125.00"),
    )
    values.update(overrides)
    return Document(**values)


CTX = LifecycleContext(tenant_id="t1", actor_id="user-1")


class LifecycleEngineTransitionTests(SimpleTestCase):
    """
    GUARANTEES:
    - Illegal or terminal requests change nothing
    - Missing signatures block the closing transition
    - Stock is checked before anything is written
    """

    def setUp(self):
        self.store = InMemoryStore()
        self.engine = _engine(self.store)

    def test_adjacent_transition_updates_state_and_audit(self):
        doc = self.store.add(_doc("sale", "pending"))

        result = self.engine.request_transition("sale", doc.id, "preparing", CTX)

        self.assertEqual(result.state, "preparing")
        self.assertFalse(result.side_effects_applied)
        history = self.engine.history("sale", doc.id, "t1")
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].from_state, "pending")
        self.assertEqual(history[0].to_state, "preparing")
        self.assertEqual(history[0].timestamp, FIXED_NOW)
        self.assertEqual(history[0].performed_by_id, "user-1")
        self.assertEqual(self.store.emitted, [])

    def test_illegal_transition_leaves_document_unchanged(self):
        doc = self.store.add(_doc("sale", "pending"))

        with self.assertRaises(IllegalTransition):
            self.engine.request_transition("sale", doc.id, "delivered", CTX)

        self.assertEqual(self.store.load("sale", doc.id), doc)
        self.assertEqual(self.store.transitions, [])

    def test_unknown_document(self):
        with self.assertRaises(DocumentNotFound):
            self.engine.request_transition("sale", uuid.uuid4(), "preparing", CTX)

    def test_other_tenant_sees_not_found(self):
        doc = self.store.add(_doc("sale", "pending", tenant_id="t2"))

        with self.assertRaises(DocumentNotFound):
            self.engine.request_transition("sale", doc.id, "preparing", CTX)
        with self.assertRaises(DocumentNotFound):
            self.engine.history("sale", doc.id, "t1")

        self.assertEqual(self.store.load("sale", doc.id).state, "pending")

    def test_terminal_document_rejects_everything(self):
        doc = self.store.add(_doc("sale", "delivered", side_effects_applied=True))

        with self.assertRaises(AlreadyTerminal) as ctx:
            self.engine.request_transition("sale", doc.id, "preparing", CTX)

        self.assertEqual(ctx.exception.state, "delivered")
        self.assertEqual(ctx.exception.http_status, 409)

    def test_notes_are_appended_with_timestamp(self):
        doc = self.store.add(_doc("sale", "pending", notes="Creada"))
        ctx = LifecycleContext(tenant_id="t1", notes="Cargando camion")

        result = self.engine.request_transition("sale", doc.id, "preparing", ctx)

        self.assertEqual(
            result.notes, "Creada\n[2025-03-01T12:00:00+00:00] Cargando camion"
        )

    def test_blank_notes_keep_existing_notes(self):
        doc = self.store.add(_doc("sale", "pending", notes="Creada"))
        ctx = LifecycleContext(tenant_id="t1", notes="   ")

        result = self.engine.request_transition("sale", doc.id, "preparing", ctx)

        self.assertEqual(result.notes, "Creada")


class SaleDeliveryTests(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.engine = _engine(self.store)
        self.ledger = SignatureLedger(store=self.store)

    def test_insufficient_stock_keeps_sale_in_transit(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 5)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="own_freight"))

        with self.assertRaises(InsufficientStock) as ctx:
            self.engine.request_transition("sale", doc.id, "delivered", CTX)

        self.assertEqual(ctx.exception.payload(), {"available": 5, "requested": 10})
        current = self.store.load("sale", doc.id)
        self.assertEqual(current.state, "in_transit")
        self.assertFalse(current.side_effects_applied)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 5)
        self.assertEqual(self.store.emitted, [])
        self.assertEqual(self.store.transitions, [])

    def test_stock_equal_to_quantity_is_enough(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 10)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="own_freight"))

        result = self.engine.request_transition("sale", doc.id, "delivered", CTX)

        self.assertEqual(result.state, "delivered")
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 0)

    def test_pickup_sale_requires_cliente_signature(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 50)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="customer_pickup"))

        with self.assertRaises(MissingSignatures) as ctx:
            self.engine.request_transition("sale", doc.id, "delivered", CTX)
        self.assertEqual(ctx.exception.roles, ["cliente"])

        self.ledger.capture(doc, "cliente", PNG)
        result = self.engine.request_transition("sale", doc.id, "delivered", CTX)

        self.assertEqual(result.state, "delivered")
        self.assertTrue(result.side_effects_applied)
        self.assertEqual(len(self.store.emitted), 1)
        instruction = self.store.emitted[0]
        self.assertEqual(len(instruction.decreases), 1)
        self.assertEqual(instruction.decreases[0].quantity, 10)
        self.assertEqual(instruction.cash_flow.amount, Decimal("125.00"))
        self.assertEqual(instruction.cash_flow.movement_type, "ingreso")
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 40)

    def test_own_freight_sale_needs_no_signature(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 50)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="own_freight"))

        result = self.engine.request_transition("sale", doc.id, "delivered", CTX)

        self.assertEqual(result.state, "delivered")

    def test_cliente_signature_auto_delivers(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 50)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="customer_pickup"))

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="sale",
            document_id=doc.id,
            role="cliente",
            image_data=PNG,
            context=CTX,
        )

        self.assertIsNone(outcome.transition_error)
        self.assertEqual(outcome.document.state, "delivered")
        self.assertEqual(len(self.store.emitted), 1)

    def test_signature_survives_failed_auto_delivery(self):
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 1)
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="customer_pickup"))

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="sale",
            document_id=doc.id,
            role="cliente",
            image_data=PNG,
            context=CTX,
        )

        self.assertIsInstance(outcome.transition_error, InsufficientStock)
        self.assertEqual(outcome.document.state, "in_transit")
        self.assertTrue(self.ledger.has_signature(doc, "cliente"))

    def test_conductor_signature_does_not_advance(self):
        doc = self.store.add(_doc("sale", "in_transit", delivery_type="own_freight"))

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="sale",
            document_id=doc.id,
            role="conductor",
            image_data=PNG,
            context=CTX,
        )

        self.assertEqual(outcome.document.state, "in_transit")
        self.assertEqual(self.store.transitions, [])


class PurchaseCompletionTests(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryStore()
        self.engine = _engine(self.store)
        self.ledger = SignatureLedger(store=self.store)

    def test_parcela_purchase_needs_three_signatures(self):
        doc = self.store.add(_doc("purchase", "returning", purchase_type="parcela"))

        with self.assertRaises(MissingSignatures) as ctx:
            self.engine.request_transition("purchase", doc.id, "completed", CTX)
        self.assertEqual(ctx.exception.roles, ["conductor", "encargado", "proveedor"])

        self.ledger.capture(doc, "conductor", PNG)
        self.ledger.capture(doc, "encargado", PNG)
        with self.assertRaises(MissingSignatures) as ctx:
            self.engine.request_transition("purchase", doc.id, "completed", CTX)
        self.assertEqual(ctx.exception.roles, ["proveedor"])
        self.assertEqual(self.store.load("purchase", doc.id).state, "returning")

        self.ledger.capture(doc, "proveedor", PNG)
        result = self.engine.request_transition("purchase", doc.id, "completed", CTX)

        self.assertEqual(result.state, "completed")
        self.assertTrue(result.side_effects_applied)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 10)
        instruction = self.store.emitted[0]
        self.assertEqual(instruction.cash_flow.amount, Decimal("-125.00"))
        self.assertEqual(instruction.cash_flow.movement_type, "egreso")

    def test_planta_purchase_skips_conductor(self):
        doc = self.store.add(_doc("purchase", "returning", purchase_type="planta"))
        self.ledger.capture(doc, "encargado", PNG)

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="purchase",
            document_id=doc.id,
            role="proveedor",
            image_data=PNG,
            context=CTX,
        )

        self.assertIsNone(outcome.transition_error)
        self.assertEqual(outcome.document.state, "completed")

    def test_proveedor_signature_without_encargado_reports_missing(self):
        doc = self.store.add(_doc("purchase", "returning", purchase_type="planta"))

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="purchase",
            document_id=doc.id,
            role="proveedor",
            image_data=PNG,
            context=CTX,
        )

        self.assertIsInstance(outcome.transition_error, MissingSignatures)
        self.assertEqual(outcome.document.state, "returning")

    def test_signatures_during_loading_are_allowed(self):
        doc = self.store.add(_doc("purchase", "loading", purchase_type="parcela"))

        self.ledger.capture(doc, "conductor", PNG)

        self.assertTrue(self.ledger.has_signature(doc, "conductor"))


class TransferExactlyOnceTests(SimpleTestCase):
    """
    GUARANTEES:
    - Inventory moves exactly once per completed transfer
    - A failed dispatch rolls the state back
    - A lost compare-and-swap is reported, not retried
    """

    def setUp(self):
        self.store = InMemoryStore()
        self.store.set_stock(PRODUCT, WAREHOUSE_A, 100)
        self.store.set_stock(PRODUCT, WAREHOUSE_B, 0)
        self.doc = self.store.add(
            _doc(
                "transfer",
                "pending",
                quantity=50,
                location_id=WAREHOUSE_A,
                to_location_id=WAREHOUSE_B,
                unit_price=None,
                total_amount=None,
            )
        )

    def test_complete_moves_stock_once(self):
        engine = _engine(self.store)

        result = engine.request_transition("transfer", self.doc.id, "completed", CTX)

        self.assertEqual(result.state, "completed")
        self.assertTrue(result.side_effects_applied)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 50)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_B), 50)
        self.assertEqual(len(self.store.emitted), 1)
        self.assertIsNone(self.store.emitted[0].cash_flow)

        with self.assertRaises(AlreadyTerminal):
            engine.request_transition("transfer", self.doc.id, "completed", CTX)

        self.assertEqual(len(self.store.emitted), 1)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 50)

    def test_cancel_moves_nothing(self):
        engine = _engine(self.store)

        result = engine.request_transition("transfer", self.doc.id, "cancelled", CTX)

        self.assertEqual(result.state, "cancelled")
        self.assertFalse(result.side_effects_applied)
        self.assertEqual(self.store.emitted, [])
        with self.assertRaises(AlreadyTerminal):
            engine.request_transition("transfer", self.doc.id, "completed", CTX)

    def test_dispatch_failure_rolls_back(self):
        engine = _engine(self.store, dispatcher=FailingDispatcher())

        with self.assertRaises(RuntimeError):
            engine.request_transition("transfer", self.doc.id, "completed", CTX)

        current = self.store.load("transfer", self.doc.id)
        self.assertEqual(current.state, "pending")
        self.assertFalse(current.side_effects_applied)
        self.assertEqual(self.store.transitions, [])
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 100)

    def test_lost_compare_and_swap(self):
        store = StaleStore()
        store.set_stock(PRODUCT, WAREHOUSE_A, 100)
        store.add(self.doc)
        engine = _engine(store)

        with self.assertRaises(ConcurrentModification):
            engine.request_transition("transfer", self.doc.id, "completed", CTX)

        self.assertEqual(store.emitted, [])
        self.assertEqual(store.transitions, [])

    def test_concurrent_completions_apply_once(self):
        engine = _engine(self.store)
        results = []
        errors = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                results.append(
                    engine.request_transition("transfer", self.doc.id, "completed", CTX)
                )
            except AlreadyTerminal as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(results), 1)
        self.assertEqual(len(errors), 7)
        self.assertEqual(len(self.store.emitted), 1)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_A), 50)
        self.assertEqual(self.store.available(PRODUCT, WAREHOUSE_B), 50)
