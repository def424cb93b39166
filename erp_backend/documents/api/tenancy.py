# documents/api/tenancy.py

"""
Tenant resolution for API requests.

The tenant always comes from the authenticated user. There is no
process-wide "current tenant".
"""

from __future__ import annotations

from documents.domain import LifecycleContext


def tenant_id_for(request) -> str:
    return str(getattr(request.user, "tenant_id", "") or "")


def context_for(request, *, notes: str = "", extra=None) -> LifecycleContext:
    user = request.user
    return LifecycleContext(
        tenant_id=tenant_id_for(request),
        actor_id=getattr(user, "pk", None),
        notes=notes or "",
        extra=extra or {},
    )
