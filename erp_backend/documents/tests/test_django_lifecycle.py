# documents/tests/test_django_lifecycle.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models import CashFlowEntry
from documents.domain import LifecycleContext
from documents.models import DocumentSignature, DocumentTransition
from documents.services.exceptions import (
    AlreadyTerminal,
    DuplicateSignature,
    InsufficientStock,
    MissingSignatures,
)
from documents.services.factory import build_engine, build_signature_ledger
from documents.services.lifecycle_engine import LifecycleEngine
from documents.services.signing import sign_document
from documents.stores.django_store import (
    DjangoAuditLog,
    DjangoDocumentStore,
    DjangoSignatureStore,
    DjangoStockGauge,
)
from documents.tests.factories import (
    PNG_DATA_URL,
    make_location,
    make_product,
    make_user,
    put_stock,
)
from inventory.models import StockMovement
from inventory.services.dispatcher import InventorySideEffectDispatcher
from inventory.services.stock import adjust_stock, available_quantity
from purchases.models import Purchase
from purchases.services.purchase_service import register_purchase
from sales.models import Sale
from sales.services.sale_service import register_sale
from transfers.models import Transfer
from transfers.services.transfer_service import create_transfer


class ExplodingDispatcher(InventorySideEffectDispatcher):
    """Applies every effect, then fails."""

    def emit(self, instruction):
        super().emit(instruction)
        raise RuntimeError("post-dispatch failure")


def _engine_with(dispatcher):
    return LifecycleEngine(
        documents=DjangoDocumentStore(),
        signatures=DjangoSignatureStore(),
        audit=DjangoAuditLog(),
        dispatcher=dispatcher,
        stock=DjangoStockGauge(),
    )


class DjangoLifecycleTestBase(TestCase):
    def setUp(self):
        self.user = make_user(tenant_id="t1")
        self.product = make_product()
        self.warehouse = make_location("Bodega Central")
        self.yard = make_location("Patio Norte")
        self.engine = build_engine()
        self.ledger = build_signature_ledger()
        self.ctx = LifecycleContext(tenant_id="t1", actor_id=self.user.pk)

    def advance(self, kind, document_id, *states, ctx=None):
        document = None
        for state in states:
            document = self.engine.request_transition(kind, document_id, state, ctx or self.ctx)
        return document


class SaleLifecycleDbTests(DjangoLifecycleTestBase):
    """
    GUARANTEES:
    - Delivery decreases stock and records one ingreso, once
    - Each stage stamps its timestamp
    - A stock shortfall at delivery changes nothing
    """

    def test_full_sale_lifecycle(self):
        put_stock(self.product, self.warehouse, 30)
        sale = register_sale(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=10,
            unit_price="12.50",
            user=self.user,
        )

        document = self.advance("sale", sale.id, "preparing", "in_transit", "delivered")

        self.assertEqual(document.state, "delivered")
        self.assertTrue(document.side_effects_applied)

        sale.refresh_from_db()
        self.assertIsNotNone(sale.preparation_time)
        self.assertIsNotNone(sale.transit_time)
        self.assertIsNotNone(sale.delivery_time)

        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.warehouse.pk),
            20,
        )
        movement = StockMovement.objects.get(document_id=sale.id)
        self.assertEqual(movement.reason, StockMovement.Reason.SALE)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUT)
        self.assertEqual(movement.quantity, 10)

        entry = CashFlowEntry.objects.get(reference_id=sale.id)
        self.assertEqual(entry.amount, Decimal("125.00"))
        self.assertEqual(entry.movement_type, "ingreso")
        self.assertEqual(entry.source_type, "venta")

        history = self.engine.history("sale", sale.id, "t1")
        self.assertEqual(
            [(h.from_state, h.to_state) for h in history],
            [
                ("pending", "preparing"),
                ("preparing", "in_transit"),
                ("in_transit", "delivered"),
            ],
        )

    def test_stock_consumed_before_delivery(self):
        put_stock(self.product, self.warehouse, 10)
        sale = register_sale(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=10,
            unit_price="1.00",
        )
        self.advance("sale", sale.id, "preparing", "in_transit")
        adjust_stock(
            product=self.product, location=self.warehouse, quantity_delta=-5, user=self.user
        )

        with self.assertRaises(InsufficientStock) as ctx:
            self.engine.request_transition("sale", sale.id, "delivered", self.ctx)

        self.assertEqual(ctx.exception.available, 5)
        sale.refresh_from_db()
        self.assertEqual(sale.status, "in_transit")
        self.assertFalse(sale.side_effects_applied)
        self.assertIsNone(sale.delivery_time)
        self.assertFalse(CashFlowEntry.objects.exists())

    def test_zero_value_sale_moves_stock_without_cash_flow(self):
        put_stock(self.product, self.warehouse, 3)
        sale = register_sale(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=3,
            unit_price="0",
        )

        document = self.advance("sale", sale.id, "preparing", "in_transit", "delivered")

        self.assertTrue(document.side_effects_applied)
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.warehouse.pk),
            0,
        )
        self.assertFalse(CashFlowEntry.objects.exists())

    def test_pickup_sale_closes_on_cliente_signature(self):
        put_stock(self.product, self.warehouse, 10)
        sale = register_sale(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=4,
            unit_price="3.00",
            delivery_type="customer_pickup",
        )
        self.advance("sale", sale.id, "preparing", "in_transit")

        with self.assertRaises(MissingSignatures):
            self.engine.request_transition("sale", sale.id, "delivered", self.ctx)

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="sale",
            document_id=sale.id,
            role="cliente",
            image_data=PNG_DATA_URL,
            context=self.ctx,
            location={"lat": 19.4, "lng": -99.1},
        )

        self.assertIsNone(outcome.transition_error)
        self.assertEqual(outcome.document.state, "delivered")
        signature = DocumentSignature.objects.get(document_id=sale.id)
        self.assertEqual(signature.location, {"lat": 19.4, "lng": -99.1})
        self.assertEqual(signature.captured_by_id, self.user.pk)
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.warehouse.pk),
            6,
        )


class PurchaseLifecycleDbTests(DjangoLifecycleTestBase):
    def test_parcela_purchase_completes_after_all_signatures(self):
        purchase = register_purchase(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=100,
            unit_price="2.00",
            purchase_type="parcela",
        )
        self.assertEqual(purchase.status, "dispatched")
        self.advance("purchase", purchase.id, "loading", "returning")

        for role in ("conductor", "encargado"):
            outcome = sign_document(
                engine=self.engine,
                ledger=self.ledger,
                kind="purchase",
                document_id=purchase.id,
                role=role,
                image_data=PNG_DATA_URL,
                context=self.ctx,
            )
            self.assertEqual(outcome.document.state, "returning")

        outcome = sign_document(
            engine=self.engine,
            ledger=self.ledger,
            kind="purchase",
            document_id=purchase.id,
            role="proveedor",
            image_data=PNG_DATA_URL,
            context=self.ctx,
        )

        self.assertEqual(outcome.document.state, "completed")
        purchase.refresh_from_db()
        self.assertTrue(purchase.side_effects_applied)
        self.assertIsNotNone(purchase.completion_time)
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.warehouse.pk),
            100,
        )
        entry = CashFlowEntry.objects.get(reference_id=purchase.id)
        self.assertEqual(entry.amount, Decimal("-200.00"))
        self.assertEqual(entry.movement_type, "egreso")

    def test_duplicate_signature_is_rejected_by_database(self):
        purchase = register_purchase(
            tenant_id="t1",
            product=self.product,
            location=self.warehouse,
            quantity=1,
            unit_price="1.00",
        )
        document = Purchase.objects.get(pk=purchase.pk).to_document()

        self.ledger.capture(document, "encargado", PNG_DATA_URL)
        with self.assertRaises(DuplicateSignature):
            self.ledger.capture(document, "encargado", PNG_DATA_URL)

        self.assertEqual(DocumentSignature.objects.filter(document_id=purchase.id).count(), 1)


class TransferLifecycleDbTests(DjangoLifecycleTestBase):
    """
    GUARANTEES:
    - Completion moves stock out and in as one unit, exactly once
    - A failure after dispatch rolls back state, stock and audit
    """

    def setUp(self):
        super().setUp()
        put_stock(self.product, self.warehouse, 100)
        self.transfer = create_transfer(
            tenant_id="t1",
            product=self.product,
            from_location=self.warehouse,
            to_location=self.yard,
            quantity=50,
            user=self.user,
        )

    def _qty(self, location):
        return available_quantity(product_id=self.product.pk, location_id=location.pk)

    def test_complete_once(self):
        document = self.engine.request_transition(
            "transfer", self.transfer.id, "completed", self.ctx
        )

        self.assertEqual(document.state, "completed")
        self.assertEqual(self._qty(self.warehouse), 50)
        self.assertEqual(self._qty(self.yard), 50)
        self.transfer.refresh_from_db()
        self.assertIsNotNone(self.transfer.completed_at)

        with self.assertRaises(AlreadyTerminal):
            self.engine.request_transition("transfer", self.transfer.id, "completed", self.ctx)

        self.assertEqual(self._qty(self.warehouse), 50)
        self.assertEqual(
            StockMovement.objects.filter(document_id=self.transfer.id).count(), 2
        )
        self.assertFalse(CashFlowEntry.objects.exists())

    def test_failure_after_dispatch_rolls_everything_back(self):
        engine = _engine_with(ExplodingDispatcher())

        with self.assertRaises(RuntimeError):
            engine.request_transition("transfer", self.transfer.id, "completed", self.ctx)

        self.transfer.refresh_from_db()
        self.assertEqual(self.transfer.status, "pending")
        self.assertFalse(self.transfer.side_effects_applied)
        self.assertIsNone(self.transfer.completed_at)
        self.assertEqual(self._qty(self.warehouse), 100)
        self.assertEqual(self._qty(self.yard), 0)
        self.assertFalse(DocumentTransition.objects.exists())
        self.assertFalse(StockMovement.objects.filter(document_id=self.transfer.id).exists())

    def test_stale_compare_and_swap_updates_nothing(self):
        store = DjangoDocumentStore()

        swapped = store.compare_and_swap(
            "transfer",
            self.transfer.id,
            expected_state="cancelled",
            new_state="completed",
            expected_side_effects_applied=False,
            side_effects_applied=True,
        )

        self.assertFalse(swapped)
        self.assertEqual(Transfer.objects.get(pk=self.transfer.pk).status, "pending")

    def test_compare_and_swap_rejects_unknown_extra_fields(self):
        with self.assertRaises(ValueError):
            DjangoDocumentStore().compare_and_swap(
                "transfer",
                self.transfer.id,
                expected_state="pending",
                new_state="cancelled",
                expected_side_effects_applied=False,
                side_effects_applied=False,
                extra={"quantity": 1},
            )

    def test_audit_rows_are_immutable(self):
        self.engine.request_transition("transfer", self.transfer.id, "cancelled", self.ctx)
        row = DocumentTransition.objects.get(document_id=self.transfer.id)

        with self.assertRaises(ValidationError):
            row.save()
        with self.assertRaises(ValidationError):
            row.delete()


class SignatureRowTests(DjangoLifecycleTestBase):
    def test_signature_rows_are_immutable(self):
        sale = Sale.objects.create(
            tenant_id="t1",
            folio="VENT-20250101-00001",
            status="in_transit",
            product=self.product,
            location=self.warehouse,
            quantity=1,
            unit_price=Decimal("1.00"),
            total_amount=Decimal("1.00"),
        )
        record = self.ledger.capture(sale.to_document(), "conductor", PNG_DATA_URL)
        row = DocumentSignature.objects.get(document_id=record.document_id)

        with self.assertRaises(ValidationError):
            row.save()
        with self.assertRaises(ValidationError):
            row.delete()
