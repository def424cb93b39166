# documents/registry.py

"""
Binds each document kind to its concrete model and per-kind storage details.

Models are resolved lazily through the app registry so the engine
never imports sales / purchases / transfers directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from django.apps import apps

from documents.choices import DocumentKind, DocumentState
from documents.services.exceptions import UnknownDocumentKind


@dataclass(frozen=True)
class KindBinding:
    kind: str
    model_label: str
    folio_prefix: str
    # state -> timestamp field stamped when the state is entered
    stage_timestamps: dict = field(default_factory=dict)
    # fields a transition may write alongside the state
    extra_fields: frozenset = frozenset()


BINDINGS = {
    DocumentKind.SALE: KindBinding(
        kind=DocumentKind.SALE,
        model_label="sales.Sale",
        folio_prefix="VENT",
        stage_timestamps={
            DocumentState.PREPARING: "preparation_time",
            DocumentState.IN_TRANSIT: "transit_time",
            DocumentState.DELIVERED: "delivery_time",
        },
    ),
    DocumentKind.PURCHASE: KindBinding(
        kind=DocumentKind.PURCHASE,
        model_label="purchases.Purchase",
        folio_prefix="COMP",
        stage_timestamps={
            DocumentState.LOADING: "loading_time",
            DocumentState.RETURNING: "return_time",
            DocumentState.COMPLETED: "completion_time",
        },
    ),
    DocumentKind.TRANSFER: KindBinding(
        kind=DocumentKind.TRANSFER,
        model_label="transfers.Transfer",
        folio_prefix="TRAS",
        stage_timestamps={
            DocumentState.COMPLETED: "completed_at",
            DocumentState.CANCELLED: "cancelled_at",
        },
        extra_fields=frozenset({"cancel_reason"}),
    ),
}


def binding_for(kind: str) -> KindBinding:
    try:
        return BINDINGS[kind]
    except KeyError:
        raise UnknownDocumentKind(f"Unknown document kind '{kind}'.")


def document_model(kind: str):
    return apps.get_model(binding_for(kind).model_label)
