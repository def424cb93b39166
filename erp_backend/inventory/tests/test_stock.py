# inventory/tests/test_stock.py

import uuid

from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from documents.services.exceptions import InsufficientStock
from documents.tests.factories import make_location, make_product, make_user, put_stock
from inventory.models import StockLevel, StockMovement
from inventory.services.stock import (
    StockAdjustmentError,
    adjust_stock,
    available_quantity,
    decrease_stock,
    increase_stock,
    stock_by_location,
)


class StockServiceTests(TestCase):
    """
    Stock-level tests.

    GUARANTEES:
    - Stock quantities are never negative
    - Every change writes exactly one immutable movement
    - Document movements must reference their document
    """

    def setUp(self):
        self.user = make_user()
        self.product = make_product()
        self.location = make_location("Bodega")

    def _qty(self):
        return available_quantity(product_id=self.product.pk, location_id=self.location.pk)

    def test_unknown_pair_has_zero(self):
        self.assertEqual(self._qty(), 0)

    def test_increase_and_decrease(self):
        doc_id = uuid.uuid4()
        increase_stock(
            product_id=self.product.pk,
            location_id=self.location.pk,
            quantity=10,
            reason="PURCHASE",
            document_kind="purchase",
            document_id=doc_id,
        )
        decrease_stock(
            product_id=self.product.pk,
            location_id=self.location.pk,
            quantity=10,
            reason="SALE",
            document_kind="sale",
            document_id=uuid.uuid4(),
        )

        self.assertEqual(self._qty(), 0)
        self.assertEqual(StockMovement.objects.count(), 2)

    def test_decrease_beyond_available(self):
        put_stock(self.product, self.location, 3)

        with self.assertRaises(InsufficientStock) as ctx:
            decrease_stock(
                product_id=self.product.pk,
                location_id=self.location.pk,
                quantity=4,
                reason="SALE",
                document_kind="sale",
                document_id=uuid.uuid4(),
            )

        self.assertEqual(ctx.exception.payload(), {"available": 3, "requested": 4})
        self.assertEqual(self._qty(), 3)

    def test_document_reason_requires_document(self):
        with self.assertRaises(ValidationError):
            increase_stock(
                product_id=self.product.pk,
                location_id=self.location.pk,
                quantity=1,
                reason="PURCHASE",
            )
        self.assertEqual(self._qty(), 0)

    def test_movements_are_immutable(self):
        put_stock(self.product, self.location, 5)
        movement = StockMovement.objects.get()

        with self.assertRaises(ValidationError):
            movement.save()
        with self.assertRaises(ValidationError):
            movement.delete()

    def test_adjust_stock(self):
        result = adjust_stock(
            product=self.product,
            location=self.location,
            quantity_delta=8,
            user=self.user,
            note="conteo fisico",
        )
        self.assertEqual(result.level.quantity, 8)
        self.assertEqual(result.movement.reason, "ADJUSTMENT")
        self.assertEqual(result.movement.performed_by, self.user)

        result = adjust_stock(product=self.product, location=self.location, quantity_delta=-8)
        self.assertEqual(result.level.quantity, 0)
        self.assertEqual(result.movement.movement_type, "OUT")

    def test_adjust_rejects_bad_input(self):
        put_stock(self.product, self.location, 2)
        foreign = make_location("Ajena", tenant_id="t2")

        for delta in (0, None, "", "x", True, -3):
            with self.subTest(delta=delta):
                with self.assertRaises(StockAdjustmentError):
                    adjust_stock(
                        product=self.product, location=self.location, quantity_delta=delta
                    )

        with self.assertRaises(StockAdjustmentError):
            adjust_stock(product=self.product, location=foreign, quantity_delta=1)

        self.assertEqual(self._qty(), 2)

    def test_stock_by_location_orders_largest_first(self):
        small = make_location("Patio")
        empty = make_location("Vacia")
        put_stock(self.product, self.location, 40)
        put_stock(self.product, small, 5)
        StockLevel.objects.create(product=self.product, location=empty, quantity=0)

        rows = list(stock_by_location(product_id=self.product.pk, tenant_id="t1"))

        self.assertEqual([r.location.name for r in rows], ["Bodega", "Patio"])
        self.assertEqual([r.quantity for r in rows], [40, 5])


class InventoryApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user(role="admin")
        self.client.force_authenticate(user=self.admin)
        self.product = make_product(sku="AGU-01")
        self.location = make_location("Bodega")

    def test_stock_requires_product_id(self):
        res = self.client.get("/api/inventory/stock/")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "VALIDATION_ERROR")

    def test_stock_unknown_product(self):
        for value in ("not-a-uuid", str(uuid.uuid4())):
            with self.subTest(value=value):
                res = self.client.get("/api/inventory/stock/", {"product_id": value})
                self.assertEqual(res.status_code, 404)

    def test_stock_by_location(self):
        other = make_location("Patio")
        put_stock(self.product, self.location, 3)
        put_stock(self.product, other, 9)

        res = self.client.get("/api/inventory/stock/", {"product_id": str(self.product.pk)})

        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["location_name"] for row in res.data], ["Patio", "Bodega"])

    def test_adjust_endpoint(self):
        res = self.client.post(
            "/api/inventory/stock/adjust/",
            {
                "product_id": str(self.product.pk),
                "location_id": str(self.location.pk),
                "quantity_delta": 12,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["quantity"], 12)

        res = self.client.post(
            "/api/inventory/stock/adjust/",
            {
                "product_id": str(self.product.pk),
                "location_id": str(self.location.pk),
                "quantity_delta": -20,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "ADJUSTMENT_ERROR")

    def test_adjust_is_admin_only(self):
        self.client.force_authenticate(user=make_user(role="manager"))

        res = self.client.post(
            "/api/inventory/stock/adjust/",
            {
                "product_id": str(self.product.pk),
                "location_id": str(self.location.pk),
                "quantity_delta": 1,
            },
            format="json",
        )

        self.assertEqual(res.status_code, 403)

    def test_movements_listing(self):
        put_stock(self.product, self.location, 3)

        res = self.client.get(
            "/api/inventory/stock/movements/", {"product_id": str(self.product.pk)}
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(res.data[0]["reason"], "ADJUSTMENT")

    def test_products_are_tenant_scoped(self):
        res = self.client.post(
            "/api/inventory/products/",
            {"sku": "AGU-01", "name": "Duplicado", "unit_price": "1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

        self.client.force_authenticate(user=make_user(role="admin", tenant_id="t2"))
        res = self.client.post(
            "/api/inventory/products/",
            {"sku": "AGU-01", "name": "Otro tenant", "unit_price": "1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(self.client.get("/api/inventory/products/").data["count"], 1)

    def test_locations_cannot_be_deleted(self):
        res = self.client.delete(f"/api/inventory/locations/{self.location.pk}/")
        self.assertEqual(res.status_code, 405)
