# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_CASHIER = "cashier"
ROLE_INVENTORY = "inventory"

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_CASHIER,
    ROLE_INVENTORY,
}

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_MANAGER, "Manager"),
    (ROLE_CASHIER, "Cashier"),
    (ROLE_INVENTORY, "Inventory Clerk"),
]


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_POS_SELL = "pos.sell"
CAP_POS_REFUND = "pos.refund"
CAP_BNPL_COLLECT = "bnpl.collect"
CAP_RECEIPTS_REPRINT = "receipts.reprint"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"  # damage approval, manual counts

CAP_PURCHASING_MANAGE = "purchasing.manage"

CAP_ACCOUNTING_POST = "accounting.post"  # expenses, manual cash entries
CAP_REPORTS_VIEW = "reports.view"

CAP_SETTINGS_MANAGE = "settings.manage"

ALL_CAPABILITIES = {
    CAP_POS_SELL,
    CAP_POS_REFUND,
    CAP_BNPL_COLLECT,
    CAP_RECEIPTS_REPRINT,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_PURCHASING_MANAGE,
    CAP_ACCOUNTING_POST,
    CAP_REPORTS_VIEW,
    CAP_SETTINGS_MANAGE,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_POS_SELL,
        CAP_POS_REFUND,
        CAP_BNPL_COLLECT,
        CAP_RECEIPTS_REPRINT,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_INVENTORY_ADJUST,
        CAP_PURCHASING_MANAGE,
        CAP_ACCOUNTING_POST,
        CAP_REPORTS_VIEW,
    },
    ROLE_CASHIER: {
        CAP_POS_SELL,
        CAP_BNPL_COLLECT,
        CAP_INVENTORY_VIEW,
        # refunds and reprints need a manager
    },
    ROLE_INVENTORY: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_PURCHASING_MANAGE,
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
    if not user or not user.is_authenticated:
        return False
    return capability in effective_capabilities_for(user)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_POS_REFUND

    Views with different read/write needs may set
    required_capability_by_method = {"GET": ..., "POST": ...}.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        by_method = getattr(view, "required_capability_by_method", None) or {}
        required = by_method.get(request.method) or getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in effective_capabilities_for(user)


class HasAnyCapability(BasePermission):
    """
    Require ANY capability from a set.

    Usage:
        required_any_capabilities = {CAP_POS_SELL, CAP_REPORTS_VIEW}
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


def read_write_capabilities(read: str, write: str) -> dict[str, str]:
    """
    Method map for HasCapability: safe methods need `read`, the rest `write`.
    """
    return {
        "GET": read,
        "HEAD": read,
        "OPTIONS": read,
        "POST": write,
        "PUT": write,
        "PATCH": write,
        "DELETE": write,
    }
