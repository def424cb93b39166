"""
SIDE-EFFECT INSTRUCTIONS

Pure builders. The engine computes one instruction per
side-effect-bearing transition; a dispatcher applies it.

- Sale     -> delivered: DecreaseInventory + cash-flow ingreso (venta)
- Purchase -> completed: IncreaseInventory + cash-flow egreso (compra)
- Transfer -> completed: DecreaseInventory(from) + IncreaseInventory(to)

Zero-value sales and purchases carry no cash-flow entry.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Union

from documents.choices import DocumentKind
from documents.domain import Document
from documents.services.exceptions import UnknownDocumentKind

# Stock movement reasons (mirrors inventory.StockMovement.Reason values)
REASON_SALE = "SALE"
REASON_PURCHASE = "PURCHASE"
REASON_TRANSFER_IN = "TRANSFER_IN"
REASON_TRANSFER_OUT = "TRANSFER_OUT"

MOVEMENT_INGRESO = "ingreso"
MOVEMENT_EGRESO = "egreso"

SOURCE_VENTA = "venta"
SOURCE_COMPRA = "compra"


@dataclass(frozen=True)
class DecreaseInventory:
    product_id: Any
    location_id: Any
    quantity: int
    reason: str


@dataclass(frozen=True)
class IncreaseInventory:
    product_id: Any
    location_id: Any
    quantity: int
    reason: str


InventoryDelta = Union[DecreaseInventory, IncreaseInventory]


@dataclass(frozen=True)
class RecordCashFlow:
    amount: Decimal
    movement_type: str
    source_type: str
    description: str = ""


@dataclass(frozen=True)
class SideEffectInstruction:
    document_kind: str
    document_id: uuid.UUID
    tenant_id: str
    folio: str
    inventory: tuple = ()
    cash_flow: Optional[RecordCashFlow] = None
    actor_id: Any = None

    @property
    def decreases(self) -> tuple:
        return tuple(d for d in self.inventory if isinstance(d, DecreaseInventory))


def _amount(document: Document) -> Decimal:
    if document.total_amount is not None:
        return Decimal(document.total_amount)
    unit_price = Decimal(document.unit_price or 0)
    return unit_price * Decimal(int(document.quantity))


def build_instruction(document: Document, *, actor_id: Any = None) -> SideEffectInstruction:
    kind = document.kind
    qty = int(document.quantity)

    if kind == DocumentKind.SALE:
        inventory = (
            DecreaseInventory(document.product_id, document.location_id, qty, REASON_SALE),
        )
        cash_flow = RecordCashFlow(
            amount=_amount(document),
            movement_type=MOVEMENT_INGRESO,
            source_type=SOURCE_VENTA,
            description=f"Venta {document.folio}",
        )
    elif kind == DocumentKind.PURCHASE:
        inventory = (
            IncreaseInventory(document.product_id, document.location_id, qty, REASON_PURCHASE),
        )
        cash_flow = RecordCashFlow(
            amount=-_amount(document),
            movement_type=MOVEMENT_EGRESO,
            source_type=SOURCE_COMPRA,
            description=f"Compra {document.folio}",
        )
    elif kind == DocumentKind.TRANSFER:
        inventory = (
            DecreaseInventory(
                document.product_id, document.location_id, qty, REASON_TRANSFER_OUT
            ),
            IncreaseInventory(
                document.product_id, document.to_location_id, qty, REASON_TRANSFER_IN
            ),
        )
        cash_flow = None
    else:
        raise UnknownDocumentKind(f"Unknown document kind '{kind}'.")

    # zero-value documents move stock only
    if cash_flow is not None and cash_flow.amount == 0:
        cash_flow = None

    return SideEffectInstruction(
        document_kind=kind,
        document_id=document.id,
        tenant_id=document.tenant_id,
        folio=document.folio,
        inventory=inventory,
        cash_flow=cash_flow,
        actor_id=actor_id,
    )
