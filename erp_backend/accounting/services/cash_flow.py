# accounting/services/cash_flow.py

"""
CASH FLOW SERVICE

record_cash_flow() is called by the side-effect dispatcher inside the
lifecycle transaction; if it fails, the transition rolls back.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import DecimalField, Sum
from django.db.models.functions import Coalesce

from accounting.models import CashFlowEntry
from accounting.services.exceptions import CashFlowError

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise CashFlowError(f"Invalid amount: {value!r}")


@transaction.atomic
def record_cash_flow(
    *,
    tenant_id: str,
    amount,
    movement_type: str,
    source_type: str,
    reference_type: str,
    reference_id: Any,
    description: str = "",
    created_by_id: Any = None,
) -> CashFlowEntry:
    entry = CashFlowEntry(
        tenant_id=tenant_id,
        amount=_to_decimal(amount),
        movement_type=movement_type,
        source_type=source_type,
        reference_type=reference_type,
        reference_id=reference_id,
        description=(description or "")[:255],
        created_by_id=created_by_id,
    )
    try:
        entry.save()
    except ValidationError as exc:
        raise CashFlowError("; ".join(exc.messages))

    logger.info(
        "Cash flow recorded",
        extra={
            "tenant_id": tenant_id,
            "movement_type": movement_type,
            "source_type": source_type,
            "amount": str(entry.amount),
            "reference_type": reference_type,
            "reference_id": str(reference_id),
        },
    )
    return entry


def cash_flow_summary(*, tenant_id: str) -> dict:
    qs = CashFlowEntry.objects.filter(tenant_id=tenant_id)
    zero = Decimal("0.00")

    def _total(**filters) -> Decimal:
        value = qs.filter(**filters).aggregate(
            total=Coalesce(
                Sum("amount"),
                zero,
                output_field=DecimalField(max_digits=14, decimal_places=2),
            )
        )["total"]
        return Decimal(value).quantize(TWOPLACES)

    ingresos = _total(movement_type=CashFlowEntry.MovementType.INGRESO)
    egresos = _total(movement_type=CashFlowEntry.MovementType.EGRESO)
    return {
        "ingresos": ingresos,
        "egresos": egresos,
        "balance": (ingresos + egresos).quantize(TWOPLACES),
    }
