# transfers/services/transfer_service.py

"""
======================================================
PATH: transfers/services/transfer_service.py
======================================================
TRANSFER SERVICE

create_transfer():
- source and destination must differ
- allocates a TRAS folio, creates the transfer as pending
- stock is NOT reserved here; availability is checked on completion

complete_transfer() / cancel_transfer():
- thin wrappers over the lifecycle engine
- cancel stores its reason in the same write as the state change
======================================================
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from documents.choices import DocumentKind, DocumentState
from documents.domain import Document, LifecycleContext
from documents.registry import binding_for
from documents.services.exceptions import TransferError
from documents.services.factory import build_engine
from documents.services.folio import next_folio
from documents.services.lifecycle_engine import LifecycleEngine
from documents.services.notes import append_note
from documents.services.registration import actor_or_none, ensure_same_tenant, parse_quantity
from documents.services.transition_rules import initial_state
from inventory.models import Location, Product
from transfers.models import Transfer

logger = logging.getLogger(__name__)


@transaction.atomic
def create_transfer(
    *,
    tenant_id: str,
    product: Product,
    from_location: Location,
    to_location: Location,
    quantity,
    notes: str = "",
    user=None,
) -> Transfer:
    if product is None or from_location is None or to_location is None:
        raise TransferError("product, from_location and to_location are required")

    if from_location.pk == to_location.pk:
        raise TransferError("Source and destination locations must be different")

    ensure_same_tenant(
        tenant_id,
        product=product,
        from_location=from_location,
        to_location=to_location,
    )

    qty = parse_quantity(quantity)

    folio = next_folio(binding_for(DocumentKind.TRANSFER).folio_prefix, tenant_id)

    transfer = Transfer.objects.create(
        tenant_id=tenant_id,
        folio=folio,
        status=initial_state(DocumentKind.TRANSFER),
        product=product,
        from_location=from_location,
        to_location=to_location,
        quantity=qty,
        notes=append_note("", notes, timezone.now()),
        created_by=actor_or_none(user),
    )

    logger.info(
        "Transfer created",
        extra={
            "operation": "TRANSFER_CREATED",
            "tenant_id": tenant_id,
            "transfer_id": str(transfer.id),
            "folio": folio,
            "quantity": qty,
        },
    )
    return transfer


def complete_transfer(
    *,
    tenant_id: str,
    transfer_id: uuid.UUID,
    user=None,
    notes: str = "",
    engine: Optional[LifecycleEngine] = None,
) -> Document:
    engine = engine or build_engine()
    return engine.request_transition(
        DocumentKind.TRANSFER,
        transfer_id,
        DocumentState.COMPLETED,
        LifecycleContext(
            tenant_id=tenant_id,
            actor_id=getattr(actor_or_none(user), "pk", None),
            notes=notes,
        ),
    )


def cancel_transfer(
    *,
    tenant_id: str,
    transfer_id: uuid.UUID,
    reason: Optional[str] = None,
    user=None,
    engine: Optional[LifecycleEngine] = None,
) -> Document:
    engine = engine or build_engine()
    reason = (reason or "").strip() or settings.DEFAULT_CANCEL_REASON
    return engine.request_transition(
        DocumentKind.TRANSFER,
        transfer_id,
        DocumentState.CANCELLED,
        LifecycleContext(
            tenant_id=tenant_id,
            actor_id=getattr(actor_or_none(user), "pk", None),
            notes=reason,
            extra={"cancel_reason": reason[:255]},
        ),
    )
