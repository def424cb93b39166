# inventory/services/stock.py

"""
STOCK SERVICE

Purpose:
- The ONLY writer of StockLevel.quantity.
- Every change writes an immutable StockMovement row.

Rules:
- increase/decrease lock the StockLevel row (select_for_update)
- multi-row callers lock through lock_stock_levels(), in sorted order
- decrease fails with InsufficientStock when available < requested
  (exact equality is allowed)
- manual adjustments never drive stock below zero
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.db import transaction

from documents.services.exceptions import InsufficientStock
from inventory.models import Location, Product, StockLevel, StockMovement

logger = logging.getLogger(__name__)


class StockAdjustmentError(ValueError):
    """Domain error for manual adjustment failures."""


@dataclass(frozen=True)
class AdjustmentResult:
    level: StockLevel
    movement: StockMovement
    quantity_delta: int


def _to_positive_int(value, *, field: str = "quantity") -> int:
    if isinstance(value, bool):
        raise StockAdjustmentError(f"{field} must be an integer")
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise StockAdjustmentError(f"{field} must be an integer")
    if qty <= 0:
        raise StockAdjustmentError(f"{field} must be greater than zero")
    return qty


def _locked_level(*, product_id, location_id) -> StockLevel:
    # ON CONFLICT DO NOTHING: a concurrent creator never aborts the transaction
    StockLevel.objects.bulk_create(
        [StockLevel(product_id=product_id, location_id=location_id)],
        ignore_conflicts=True,
    )
    return StockLevel.objects.select_for_update().get(
        product_id=product_id,
        location_id=location_id,
    )


def lock_order_key(pair) -> tuple:
    product_id, location_id = pair
    return (str(product_id), str(location_id))


def lock_stock_levels(pairs) -> dict:
    """
    Lock every (product_id, location_id) row in one stable order.

    Callers touching more than one row take all locks here first, so two
    transactions moving stock in opposite directions cannot deadlock.
    Must run inside a transaction.
    """
    return {
        pair: _locked_level(product_id=pair[0], location_id=pair[1])
        for pair in sorted(set(pairs), key=lock_order_key)
    }


# ============================================================
# QUERIES
# ============================================================


def available_quantity(*, product_id, location_id) -> int:
    qty = (
        StockLevel.objects.filter(product_id=product_id, location_id=location_id)
        .values_list("quantity", flat=True)
        .first()
    )
    return int(qty or 0)


def stock_by_location(*, product_id, tenant_id: Optional[str] = None):
    """
    Locations holding the product, largest quantity first.
    Empty locations are omitted.
    """
    qs = StockLevel.objects.filter(product_id=product_id, quantity__gt=0)
    if tenant_id is not None:
        qs = qs.filter(location__tenant_id=tenant_id)
    return qs.select_related("location", "product").order_by("-quantity", "location__name")


# ============================================================
# WRITES
# ============================================================


@transaction.atomic
def increase_stock(
    *,
    product_id,
    location_id,
    quantity,
    reason: str,
    document_kind: str = "",
    document_id: Any = None,
    performed_by_id: Any = None,
    note: str = "",
) -> StockLevel:
    qty = _to_positive_int(quantity)
    level = _locked_level(product_id=product_id, location_id=location_id)

    level.quantity = int(level.quantity) + qty
    level.save(update_fields=["quantity", "updated_at"])

    StockMovement.objects.create(
        product_id=product_id,
        location_id=location_id,
        movement_type=StockMovement.MovementType.IN,
        reason=reason,
        quantity=qty,
        document_kind=document_kind,
        document_id=document_id,
        performed_by_id=performed_by_id,
        note=note,
    )
    return level


@transaction.atomic
def decrease_stock(
    *,
    product_id,
    location_id,
    quantity,
    reason: str,
    document_kind: str = "",
    document_id: Any = None,
    performed_by_id: Any = None,
    note: str = "",
) -> StockLevel:
    qty = _to_positive_int(quantity)
    level = _locked_level(product_id=product_id, location_id=location_id)

    available = int(level.quantity)
    if available < qty:
        raise InsufficientStock(available, qty)

    level.quantity = available - qty
    level.save(update_fields=["quantity", "updated_at"])

    StockMovement.objects.create(
        product_id=product_id,
        location_id=location_id,
        movement_type=StockMovement.MovementType.OUT,
        reason=reason,
        quantity=qty,
        document_kind=document_kind,
        document_id=document_id,
        performed_by_id=performed_by_id,
        note=note,
    )
    return level


@transaction.atomic
def adjust_stock(
    *,
    product: Product,
    location: Location,
    quantity_delta,
    user=None,
    note: str = "",
) -> AdjustmentResult:
    """
    Manual correction with an immutable ADJUSTMENT movement.

    quantity_delta:
      +N -> IN adjustment
      -N -> OUT adjustment
    """
    if product is None or location is None:
        raise StockAdjustmentError("product and location are required")

    if product.tenant_id != location.tenant_id:
        raise StockAdjustmentError("product and location belong to different tenants")

    if quantity_delta is None or quantity_delta == "" or isinstance(quantity_delta, bool):
        raise StockAdjustmentError("quantity_delta must be an integer")
    try:
        delta = int(quantity_delta)
    except (TypeError, ValueError):
        raise StockAdjustmentError("quantity_delta must be an integer")
    if delta == 0:
        raise StockAdjustmentError("quantity_delta cannot be 0")

    level = _locked_level(product_id=product.pk, location_id=location.pk)
    current = int(level.quantity)

    if delta < 0 and current + delta < 0:
        raise StockAdjustmentError(
            f"Adjustment would make stock negative (current={current}, delta={delta})"
        )

    level.quantity = current + delta
    level.save(update_fields=["quantity", "updated_at"])

    movement = StockMovement.objects.create(
        product=product,
        location=location,
        movement_type=(
            StockMovement.MovementType.IN if delta > 0 else StockMovement.MovementType.OUT
        ),
        reason=StockMovement.Reason.ADJUSTMENT,
        quantity=abs(delta),
        performed_by=user if getattr(user, "is_authenticated", False) else None,
        note=(note or "").strip()[:255],
    )

    logger.info(
        "Stock adjusted",
        extra={
            "product_id": str(product.pk),
            "location_id": str(location.pk),
            "delta": delta,
            "quantity": level.quantity,
        },
    )
    return AdjustmentResult(level=level, movement=movement, quantity_delta=delta)
