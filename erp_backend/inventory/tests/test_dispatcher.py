# inventory/tests/test_dispatcher.py

import uuid
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from accounting.models import CashFlowEntry
from documents.services.exceptions import SideEffectFailed
from documents.services.side_effects import (
    DecreaseInventory,
    IncreaseInventory,
    RecordCashFlow,
    SideEffectInstruction,
)
from documents.tests.factories import make_location, make_product, put_stock
from inventory.models import StockLevel, StockMovement
from inventory.services import stock
from inventory.services.dispatcher import InventorySideEffectDispatcher
from inventory.services.stock import available_quantity, lock_order_key, lock_stock_levels


def _instruction(*inventory, cash_flow=None, kind="transfer"):
    return SideEffectInstruction(
        document_kind=kind,
        document_id=uuid.uuid4(),
        tenant_id="t1",
        folio="TRAS-20250101-00001",
        inventory=tuple(inventory),
        cash_flow=cash_flow,
    )


class DispatcherLockingTests(TestCase):
    """
    GUARANTEES:
    - All stock rows are locked before any quantity changes
    - Locks are taken in one stable order whatever the instruction order
    - Missing destination rows are created, never duplicated
    """

    def setUp(self):
        self.product = make_product()
        self.first, self.second = sorted(
            [make_location("Bodega"), make_location("Patio")],
            key=lambda loc: lock_order_key((self.product.pk, loc.pk)),
        )
        self.dispatcher = InventorySideEffectDispatcher()

    def _record_locks(self):
        calls = []
        original = stock._locked_level

        def recording(*, product_id, location_id):
            calls.append((product_id, location_id))
            return original(product_id=product_id, location_id=location_id)

        return calls, mock.patch.object(stock, "_locked_level", side_effect=recording)

    def test_opposite_transfers_lock_in_the_same_order(self):
        put_stock(self.product, self.first, 10)
        put_stock(self.product, self.second, 10)
        expected = [(self.product.pk, self.first.pk), (self.product.pk, self.second.pk)]

        for source, target in ((self.second, self.first), (self.first, self.second)):
            with self.subTest(source=source.name):
                calls, patcher = self._record_locks()
                with patcher:
                    self.dispatcher.emit(
                        _instruction(
                            DecreaseInventory(self.product.pk, source.pk, 4, "TRANSFER_OUT"),
                            IncreaseInventory(self.product.pk, target.pk, 4, "TRANSFER_IN"),
                        )
                    )
                self.assertEqual(calls[:2], expected)

        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.first.pk), 10
        )
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.second.pk), 10
        )

    def test_missing_destination_row_is_created_once(self):
        put_stock(self.product, self.second, 6)

        self.dispatcher.emit(
            _instruction(
                DecreaseInventory(self.product.pk, self.second.pk, 6, "TRANSFER_OUT"),
                IncreaseInventory(self.product.pk, self.first.pk, 6, "TRANSFER_IN"),
            )
        )

        self.assertEqual(
            StockLevel.objects.filter(product=self.product, location=self.first).count(), 1
        )
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.first.pk), 6
        )

    def test_lock_stock_levels_is_sorted_and_idempotent(self):
        pairs = [
            (self.product.pk, self.second.pk),
            (self.product.pk, self.first.pk),
            (self.product.pk, self.second.pk),
        ]

        locked = lock_stock_levels(pairs)
        again = lock_stock_levels(pairs)

        self.assertEqual(
            list(locked),
            [(self.product.pk, self.first.pk), (self.product.pk, self.second.pk)],
        )
        self.assertEqual(
            [level.pk for level in locked.values()],
            [level.pk for level in again.values()],
        )
        self.assertEqual(StockLevel.objects.filter(product=self.product).count(), 2)


class DispatcherCashFlowTests(TestCase):
    """
    GUARANTEES:
    - A rejected cash-flow entry surfaces as a lifecycle error
    - Nothing from the instruction is kept when it does
    """

    def setUp(self):
        self.product = make_product()
        self.warehouse = make_location("Bodega")
        put_stock(self.product, self.warehouse, 5)

    def test_rejected_cash_flow_rolls_back_stock(self):
        instruction = _instruction(
            DecreaseInventory(self.product.pk, self.warehouse.pk, 2, "SALE"),
            cash_flow=RecordCashFlow(
                amount=Decimal("-3.00"),
                movement_type="ingreso",
                source_type="venta",
            ),
            kind="sale",
        )

        with self.assertRaises(SideEffectFailed) as ctx:
            InventorySideEffectDispatcher().emit(instruction)

        self.assertEqual(ctx.exception.code, "SIDE_EFFECT_FAILED")
        self.assertEqual(ctx.exception.http_status, 400)
        self.assertEqual(
            available_quantity(product_id=self.product.pk, location_id=self.warehouse.pk), 5
        )
        self.assertFalse(StockMovement.objects.filter(reason="SALE").exists())
        self.assertFalse(CashFlowEntry.objects.exists())
