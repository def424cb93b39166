"""
DOCUMENT TRANSITION RULES

The ONLY definition of which state changes are allowed,
per document kind.

DESIGN PRINCIPLES:
- No database access
- No side effects
- Single source of truth for sales, purchases and transfers
"""

from __future__ import annotations

from documents.choices import DocumentKind, DocumentState
from documents.services.exceptions import IllegalTransition, UnknownDocumentKind

# ============================================================
# STATE DEFINITIONS
# ============================================================

STATE_CHAINS = {
    DocumentKind.SALE: (
        DocumentState.PENDING,
        DocumentState.PREPARING,
        DocumentState.IN_TRANSIT,
        DocumentState.DELIVERED,
    ),
    DocumentKind.PURCHASE: (
        DocumentState.DISPATCHED,
        DocumentState.LOADING,
        DocumentState.RETURNING,
        DocumentState.COMPLETED,
    ),
    DocumentKind.TRANSFER: (
        DocumentState.PENDING,
        DocumentState.COMPLETED,
        DocumentState.CANCELLED,
    ),
}

ALLOWED_TRANSITIONS = {
    DocumentKind.SALE: {
        DocumentState.PENDING: {DocumentState.PREPARING},
        DocumentState.PREPARING: {DocumentState.IN_TRANSIT},
        DocumentState.IN_TRANSIT: {DocumentState.DELIVERED},
    },
    DocumentKind.PURCHASE: {
        DocumentState.DISPATCHED: {DocumentState.LOADING},
        DocumentState.LOADING: {DocumentState.RETURNING},
        DocumentState.RETURNING: {DocumentState.COMPLETED},
    },
    DocumentKind.TRANSFER: {
        DocumentState.PENDING: {DocumentState.COMPLETED, DocumentState.CANCELLED},
    },
}

TERMINAL_STATES = {
    DocumentKind.SALE: {DocumentState.DELIVERED},
    DocumentKind.PURCHASE: {DocumentState.COMPLETED},
    DocumentKind.TRANSFER: {DocumentState.COMPLETED, DocumentState.CANCELLED},
}

# Reaching this state dispatches inventory / cash-flow effects.
SIDE_EFFECT_STATES = {
    DocumentKind.SALE: DocumentState.DELIVERED,
    DocumentKind.PURCHASE: DocumentState.COMPLETED,
    DocumentKind.TRANSFER: DocumentState.COMPLETED,
}


# ============================================================
# DOMAIN RULES
# ============================================================


def _require_kind(kind: str) -> str:
    if kind not in ALLOWED_TRANSITIONS:
        raise UnknownDocumentKind(f"Unknown document kind '{kind}'.")
    return kind


def states_for(kind: str) -> tuple:
    return STATE_CHAINS[_require_kind(kind)]


def initial_state(kind: str) -> str:
    return STATE_CHAINS[_require_kind(kind)][0]


def is_terminal(kind: str, state: str) -> bool:
    return state in TERMINAL_STATES[_require_kind(kind)]


def side_effect_state(kind: str) -> str:
    return SIDE_EFFECT_STATES[_require_kind(kind)]


def is_legal(kind: str, from_state: str, to_state: str) -> bool:
    table = ALLOWED_TRANSITIONS.get(kind)
    if table is None:
        return False
    return to_state in table.get(from_state, set())


def validate_transition(kind: str, from_state: str, to_state: str) -> None:
    _require_kind(kind)
    if not is_legal(kind, from_state, to_state):
        raise IllegalTransition(from_state, to_state)
