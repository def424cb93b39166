# inventory/services/dispatcher.py

"""
SIDE-EFFECT DISPATCHER (ORM)

Applies a SideEffectInstruction to stock levels and the cash-flow ledger.

Runs inside the lifecycle engine's transaction: if any delta fails
(e.g. stock consumed by a concurrent document) the whole transition
rolls back, including the state change.

Locking:
- every StockLevel row the instruction touches is locked up front,
  in lock_stock_levels() order, before any quantity changes
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.services.cash_flow import record_cash_flow
from accounting.services.exceptions import CashFlowError
from documents.services.exceptions import SideEffectFailed
from documents.services.side_effects import DecreaseInventory, SideEffectInstruction
from inventory.services.stock import decrease_stock, increase_stock, lock_stock_levels

logger = logging.getLogger(__name__)


class InventorySideEffectDispatcher:
    @transaction.atomic
    def emit(self, instruction: SideEffectInstruction) -> None:
        lock_stock_levels(
            (delta.product_id, delta.location_id) for delta in instruction.inventory
        )

        for delta in instruction.inventory:
            apply = decrease_stock if isinstance(delta, DecreaseInventory) else increase_stock
            apply(
                product_id=delta.product_id,
                location_id=delta.location_id,
                quantity=delta.quantity,
                reason=delta.reason,
                document_kind=instruction.document_kind,
                document_id=instruction.document_id,
                performed_by_id=instruction.actor_id,
                note=instruction.folio,
            )

        if instruction.cash_flow is not None:
            entry = instruction.cash_flow
            try:
                record_cash_flow(
                    tenant_id=instruction.tenant_id,
                    amount=entry.amount,
                    movement_type=entry.movement_type,
                    source_type=entry.source_type,
                    reference_type=instruction.document_kind,
                    reference_id=instruction.document_id,
                    description=entry.description,
                    created_by_id=instruction.actor_id,
                )
            except CashFlowError as exc:
                raise SideEffectFailed(f"Cash flow rejected: {exc}") from exc

        logger.info(
            "Side effects applied",
            extra={
                "document_kind": instruction.document_kind,
                "document_id": str(instruction.document_id),
                "folio": instruction.folio,
                "deltas": len(instruction.inventory),
                "cash_flow": instruction.cash_flow is not None,
            },
        )
