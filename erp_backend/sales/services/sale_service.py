# sales/services/sale_service.py

"""
======================================================
PATH: sales/services/sale_service.py
======================================================
SALE REGISTRATION SERVICE

register_sale():
- validates quantity > 0 and unit_price >= 0
- product, location and client must belong to the caller's tenant
- checks availability at the source location (equality allowed)
- allocates a VENT folio
- creates the sale in its initial state with total = quantity x unit_price

Status changes never happen here; they go through the lifecycle engine.
======================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from documents.choices import DeliveryType, DocumentKind
from documents.registry import binding_for
from documents.services.exceptions import InsufficientStock, RegistrationError
from documents.services.folio import next_folio
from documents.services.notes import append_note
from documents.services.registration import (
    TWOPLACES,
    actor_or_none,
    ensure_same_tenant,
    parse_quantity,
    parse_unit_price,
)
from documents.services.transition_rules import initial_state
from inventory.models import Location, Product
from inventory.services.stock import available_quantity
from sales.models import Client, Sale

logger = logging.getLogger(__name__)


@transaction.atomic
def register_sale(
    *,
    tenant_id: str,
    product: Product,
    location: Location,
    quantity,
    unit_price,
    client: Optional[Client] = None,
    delivery_type: str = DeliveryType.OWN_FREIGHT,
    vehicle: str = "",
    driver_name: str = "",
    notes: str = "",
    user=None,
) -> Sale:
    if product is None or location is None:
        raise RegistrationError("product and location are required")

    ensure_same_tenant(tenant_id, product=product, location=location, client=client)

    if delivery_type not in DeliveryType.values:
        raise RegistrationError(f"Invalid delivery type: {delivery_type}")

    qty = parse_quantity(quantity)
    price = parse_unit_price(unit_price)

    available = available_quantity(product_id=product.pk, location_id=location.pk)
    if available < qty:
        raise InsufficientStock(available, qty)

    folio = next_folio(binding_for(DocumentKind.SALE).folio_prefix, tenant_id)

    sale = Sale.objects.create(
        tenant_id=tenant_id,
        folio=folio,
        status=initial_state(DocumentKind.SALE),
        client=client,
        product=product,
        location=location,
        quantity=qty,
        unit_price=price,
        total_amount=(price * qty).quantize(TWOPLACES),
        delivery_type=delivery_type,
        vehicle=(vehicle or "").strip(),
        driver_name=(driver_name or "").strip(),
        notes=append_note("", notes, timezone.now()),
        created_by=actor_or_none(user),
    )

    logger.info(
        "Sale registered",
        extra={
            "operation": "SALE_CREATED",
            "tenant_id": tenant_id,
            "sale_id": str(sale.id),
            "folio": folio,
            "quantity": qty,
            "total_amount": str(sale.total_amount),
        },
    )
    return sale
