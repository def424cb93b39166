# documents/domain.py

"""
Plain value objects the lifecycle engine works on.

The engine never touches ORM instances. Stores translate their rows
into these snapshots and back.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Document:
    id: uuid.UUID
    kind: str
    state: str
    tenant_id: str
    folio: str
    product_id: Any
    quantity: int
    side_effects_applied: bool = False
    location_id: Any = None
    to_location_id: Any = None
    unit_price: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    delivery_type: str = ""
    purchase_type: str = ""
    notes: str = ""


@dataclass(frozen=True)
class SignatureRecord:
    document_kind: str
    document_id: uuid.UUID
    role: str
    image_data: str
    captured_at: datetime
    tenant_id: str = ""
    captured_by_id: Any = None
    location: Optional[Mapping[str, Any]] = None
    face_auth_data: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class TransitionRecord:
    document_kind: str
    document_id: uuid.UUID
    from_state: str
    to_state: str
    timestamp: datetime
    tenant_id: str = ""
    performed_by_id: Any = None
    notes: str = ""


@dataclass(frozen=True)
class LifecycleContext:
    """
    Who is asking, for which tenant.

    `extra` carries kind-specific fields written in the same
    compare-and-swap as the state (e.g. a transfer's cancel_reason).
    """

    tenant_id: str
    actor_id: Any = None
    notes: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict)
