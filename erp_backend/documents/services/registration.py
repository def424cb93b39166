"""
Input checks shared by the document registration services.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from documents.services.exceptions import RegistrationError

TWOPLACES = Decimal("0.01")


def parse_quantity(value) -> int:
    if isinstance(value, bool):
        raise RegistrationError("quantity must be an integer")
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise RegistrationError("quantity must be an integer")
    if qty <= 0:
        raise RegistrationError("quantity must be greater than zero")
    return qty


def parse_unit_price(value) -> Decimal:
    try:
        price = Decimal(str(value)).quantize(TWOPLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise RegistrationError("unit_price must be a number")
    if price < 0:
        raise RegistrationError("unit_price cannot be negative")
    return price


def ensure_same_tenant(tenant_id: str, **objects) -> None:
    for name, obj in objects.items():
        if obj is not None and obj.tenant_id != tenant_id:
            raise RegistrationError(f"{name} does not belong to this tenant")


def actor_or_none(user):
    return user if getattr(user, "is_authenticated", False) else None
