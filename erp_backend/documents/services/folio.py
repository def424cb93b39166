"""
FOLIO ALLOCATION

next_folio(prefix, tenant_id) -> "VENT-20250101-00001"

Rules:
- one counter per (tenant, prefix), created on first use
- counter is incremented under row lock, so folios never repeat
- date part is the local allocation date; the counter does not reset daily
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from documents.models import FolioSequence
from documents.services.exceptions import FolioError

logger = logging.getLogger(__name__)

PREFIX_SALE = "VENT"
PREFIX_PURCHASE = "COMP"
PREFIX_TRANSFER = "TRAS"

KNOWN_PREFIXES = (
    PREFIX_PURCHASE,
    PREFIX_SALE,
    PREFIX_TRANSFER,
)


def format_folio(prefix: str, number: int, on: date) -> str:
    width = int(getattr(settings, "FOLIO_PAD_WIDTH", 5))
    return f"{prefix}-{on.strftime('%Y%m%d')}-{number:0{width}d}"


@transaction.atomic
def next_folio(prefix: str, tenant_id: str, *, today: Optional[date] = None) -> str:
    prefix = (prefix or "").strip().upper()
    if prefix not in KNOWN_PREFIXES:
        raise FolioError(f"Unknown folio prefix: {prefix or '<empty>'}")

    tenant_id = (tenant_id or "").strip()
    if not tenant_id:
        raise FolioError("tenant_id is required to allocate a folio")

    FolioSequence.objects.bulk_create(
        [FolioSequence(tenant_id=tenant_id, prefix=prefix)],
        ignore_conflicts=True,
    )
    sequence = FolioSequence.objects.select_for_update().get(
        tenant_id=tenant_id,
        prefix=prefix,
    )
    sequence.current_number += 1
    sequence.save(update_fields=["current_number", "updated_at"])

    folio = format_folio(prefix, sequence.current_number, today or timezone.localdate())

    logger.debug(
        "Folio allocated",
        extra={"tenant_id": tenant_id, "prefix": prefix, "folio": folio},
    )
    return folio
