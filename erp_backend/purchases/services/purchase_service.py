# purchases/services/purchase_service.py

"""
PURCHASE REGISTRATION SERVICE

register_purchase():
- validates quantity > 0, unit_price >= 0 and the purchase type
- product, destination location and provider must belong to the tenant
- allocates a COMP folio
- creates the purchase in its initial state (dispatched)

No stock moves here; inventory increases when the purchase completes.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from documents.choices import DocumentKind, PurchaseType
from documents.registry import binding_for
from documents.services.exceptions import RegistrationError
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
from purchases.models import Provider, Purchase

logger = logging.getLogger(__name__)


@transaction.atomic
def register_purchase(
    *,
    tenant_id: str,
    product: Product,
    location: Location,
    quantity,
    unit_price,
    purchase_type: str = PurchaseType.PLANTA,
    provider: Optional[Provider] = None,
    vehicle: str = "",
    driver_name: str = "",
    notes: str = "",
    user=None,
) -> Purchase:
    if product is None or location is None:
        raise RegistrationError("product and location are required")

    ensure_same_tenant(tenant_id, product=product, location=location, provider=provider)

    if purchase_type not in PurchaseType.values:
        raise RegistrationError(f"Invalid purchase type: {purchase_type}")

    qty = parse_quantity(quantity)
    price = parse_unit_price(unit_price)

    folio = next_folio(binding_for(DocumentKind.PURCHASE).folio_prefix, tenant_id)

    purchase = Purchase.objects.create(
        tenant_id=tenant_id,
        folio=folio,
        status=initial_state(DocumentKind.PURCHASE),
        provider=provider,
        product=product,
        location=location,
        purchase_type=purchase_type,
        quantity=qty,
        unit_price=price,
        total_amount=(price * qty).quantize(TWOPLACES),
        vehicle=(vehicle or "").strip(),
        driver_name=(driver_name or "").strip(),
        notes=append_note("", notes, timezone.now()),
        created_by=actor_or_none(user),
    )

    logger.info(
        "Purchase registered",
        extra={
            "operation": "PURCHASE_CREATED",
            "tenant_id": tenant_id,
            "purchase_id": str(purchase.id),
            "folio": folio,
            "purchase_type": purchase_type,
            "quantity": qty,
        },
    )
    return purchase
