# documents/tests/factories.py

"""
Small builders shared by the database-backed test modules.
"""

import base64
import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model

from inventory.models import Location, Product
from inventory.services.stock import increase_stock

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")

User = get_user_model()


def make_user(*, role="admin", tenant_id="t1", **extra):
    return User.objects.create_user(
        email=f"{role}-{uuid.uuid4().hex[:8]}@example.com",
        password="password123",
        role=role,
        tenant_id=tenant_id,
        **extra,
    )


def make_product(*, tenant_id="t1", sku=None, unit_price="12.50"):
    return Product.objects.create(
        tenant_id=tenant_id,
        sku=sku or f"SKU-{uuid.uuid4().hex[:6].upper()}",
        name="Aguacate Hass",
        unit_price=Decimal(unit_price),
    )


def make_location(name, *, tenant_id="t1"):
    return Location.objects.create(tenant_id=tenant_id, name=name)


def put_stock(product, location, quantity):
    # seeds stock through the ledger so movements stay consistent
    return increase_stock(
        product_id=product.pk,
        location_id=location.pk,
        quantity=quantity,
        reason="ADJUSTMENT",
        note="test seed",
    )
