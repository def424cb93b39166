"""
SIGNATURE REQUIREMENTS

Which roles may sign a document kind, which roles must have signed
before a target state is entered, and which signature closes a document.

Pure rules. No storage.
"""

from __future__ import annotations

from typing import Optional

from documents.choices import (
    DeliveryType,
    DocumentKind,
    DocumentState,
    PurchaseType,
    SignerRole,
)
from documents.domain import Document

ALLOWED_SIGNERS = {
    DocumentKind.SALE: frozenset({SignerRole.CLIENTE, SignerRole.CONDUCTOR}),
    DocumentKind.PURCHASE: frozenset(
        {SignerRole.CONDUCTOR, SignerRole.ENCARGADO, SignerRole.PROVEEDOR}
    ),
    DocumentKind.TRANSFER: frozenset(),
}

# (state the document must be in, state to advance to) for the closing signer
CLOSING_SIGNERS = {
    (DocumentKind.SALE, SignerRole.CLIENTE): (
        DocumentState.IN_TRANSIT,
        DocumentState.DELIVERED,
    ),
    (DocumentKind.PURCHASE, SignerRole.PROVEEDOR): (
        DocumentState.RETURNING,
        DocumentState.COMPLETED,
    ),
}


def allowed_signers(kind: str) -> frozenset:
    return ALLOWED_SIGNERS.get(kind, frozenset())


def required_signers(document: Document, target_state: str) -> frozenset:
    if document.kind == DocumentKind.PURCHASE and target_state == DocumentState.COMPLETED:
        roles = {SignerRole.ENCARGADO, SignerRole.PROVEEDOR}
        if document.purchase_type == PurchaseType.PARCELA:
            roles.add(SignerRole.CONDUCTOR)
        return frozenset(roles)

    if document.kind == DocumentKind.SALE and target_state == DocumentState.DELIVERED:
        if document.delivery_type == DeliveryType.CUSTOMER_PICKUP:
            return frozenset({SignerRole.CLIENTE})
        return frozenset()

    return frozenset()


def closing_target(document: Document, role: str) -> Optional[str]:
    """
    Target state to auto-advance to after `role` signs, or None.
    """
    rule = CLOSING_SIGNERS.get((document.kind, role))
    if rule is None:
        return None
    from_state, to_state = rule
    if document.state != from_state:
        return None
    return to_state
