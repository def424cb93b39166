# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_SELLER = "seller"
ROLE_BUYER = "buyer"
ROLE_WAREHOUSE = "warehouse"
ROLE_DRIVER = "driver"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_SELLER,
    ROLE_BUYER,
    ROLE_WAREHOUSE,
    ROLE_DRIVER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_DOCUMENTS_VIEW = "documents.view"

CAP_SALES_MANAGE = "sales.manage"
CAP_PURCHASES_MANAGE = "purchases.manage"
CAP_TRANSFERS_MANAGE = "transfers.manage"

CAP_SIGNATURES_CAPTURE = "signatures.capture"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"

CAP_CASHFLOW_VIEW = "cashflow.view"

ALL_CAPABILITIES = {
    CAP_DOCUMENTS_VIEW,
    CAP_SALES_MANAGE,
    CAP_PURCHASES_MANAGE,
    CAP_TRANSFERS_MANAGE,
    CAP_SIGNATURES_CAPTURE,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_CASHFLOW_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_DOCUMENTS_VIEW,
        CAP_SALES_MANAGE,
        CAP_PURCHASES_MANAGE,
        CAP_TRANSFERS_MANAGE,
        CAP_SIGNATURES_CAPTURE,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_CASHFLOW_VIEW,
        # inventory.adjust stays admin-only
    },
    ROLE_SELLER: {
        CAP_DOCUMENTS_VIEW,
        CAP_SALES_MANAGE,
        CAP_SIGNATURES_CAPTURE,
        CAP_INVENTORY_VIEW,
    },
    ROLE_BUYER: {
        CAP_DOCUMENTS_VIEW,
        CAP_PURCHASES_MANAGE,
        CAP_SIGNATURES_CAPTURE,
        CAP_INVENTORY_VIEW,
    },
    ROLE_WAREHOUSE: {
        CAP_DOCUMENTS_VIEW,
        CAP_TRANSFERS_MANAGE,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
    },
    ROLE_DRIVER: {
        CAP_DOCUMENTS_VIEW,
        CAP_SIGNATURES_CAPTURE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    return capability in effective_capabilities_for(user)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_SALES_MANAGE
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # Deny-by-default when the view forgot to declare one
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        view.required_any_capabilities = {CAP_DOCUMENTS_VIEW, CAP_INVENTORY_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_capabilities", None)
        if not required:
            return False

        caps = effective_capabilities_for(user)
        return any(cap in caps for cap in set(required))


# =========================================================
# Role Permissions
# =========================================================
class BaseRolePermission(BasePermission):
    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        return get_user_role(user) in self.allowed_roles


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES
