# core/permissions.py

"""
Static permission catalog.

Pure data: roles, atomic permission tokens, the role → token matrix
and the module → token sets. Consumers go through
permissions_for_role() / module_tokens() so new roles or tokens only
need edits to the tables below.
"""

from typing import Dict, FrozenSet, Optional

from core.roles import is_super_admin, same_role_name
from models.enums import RoleName


# ============================================
# PERMISSION TOKENS
# ============================================
PERMISSIONS: Dict[str, str] = {
    # Dashboard
    "VIEW_DASHBOARD": "view_dashboard",

    # Senior Citizen Management
    "VIEW_MEMBERS": "view_members",
    "CREATE_MEMBER": "create_member",
    "EDIT_MEMBER": "edit_member",
    "DELETE_MEMBER": "delete_member",
    "ARCHIVE_MEMBER": "archive_member",

    # Payment Management
    "VIEW_PAYMENTS": "view_payments",
    "CREATE_PAYMENT": "create_payment",
    "EDIT_PAYMENT": "edit_payment",
    "DELETE_PAYMENT": "delete_payment",
    "EXPORT_PAYMENT": "export_payment",

    # Services availed
    "VIEW_SERVICES": "view_services",
    "APPROVE_SERVICE": "approve_service",
    "REJECT_SERVICE": "reject_service",
    "DELETE_SERVICE": "delete_service",

    # Dynamic Reporting
    "VIEW_REPORTS": "view_reports",
    "GENERATE_REPORT": "generate_report",
    "EXPORT_REPORT": "export_report",
    "DELETE_REPORT": "delete_report",
    "MANAGE_TEMPLATES": "manage_templates",

    # Notifications
    "VIEW_NOTIFICATIONS": "view_notifications",
    "SEND_NOTIFICATIONS": "send_notifications",

    # Access control / user management
    "MANAGE_USERS": "manage_users",
    "MANAGE_ROLES": "manage_roles",
    "VIEW_AUDIT_LOG": "view_audit_log",
    "MANAGE_PERMISSIONS": "manage_permissions",

    # Document Manager
    "VIEW_DOCUMENTS": "view_documents",
    "MANAGE_DOCUMENTS": "manage_documents",
    "DELETE_DOCUMENTS": "delete_documents",
}

P = PERMISSIONS
ALL_TOKENS: FrozenSet[str] = frozenset(PERMISSIONS.values())


# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {

    # =====================================================
    # SUPER ADMIN — every defined token
    # =====================================================
    RoleName.super_admin.value: ALL_TOKENS,

    # =====================================================
    # ADMIN — everything except role/permission management
    # =====================================================
    RoleName.admin.value: frozenset({
        P["VIEW_DASHBOARD"],

        P["VIEW_MEMBERS"], P["CREATE_MEMBER"], P["EDIT_MEMBER"],
        P["DELETE_MEMBER"], P["ARCHIVE_MEMBER"],

        P["VIEW_PAYMENTS"], P["CREATE_PAYMENT"], P["EDIT_PAYMENT"],
        P["DELETE_PAYMENT"], P["EXPORT_PAYMENT"],

        P["VIEW_SERVICES"], P["APPROVE_SERVICE"], P["REJECT_SERVICE"],
        P["DELETE_SERVICE"],

        P["VIEW_REPORTS"], P["GENERATE_REPORT"], P["EXPORT_REPORT"],
        P["DELETE_REPORT"], P["MANAGE_TEMPLATES"],

        P["VIEW_NOTIFICATIONS"], P["SEND_NOTIFICATIONS"],

        P["VIEW_DOCUMENTS"], P["MANAGE_DOCUMENTS"], P["DELETE_DOCUMENTS"],

        P["MANAGE_USERS"], P["VIEW_AUDIT_LOG"],
    }),

    # =====================================================
    # OFFICER — no deletes
    # =====================================================
    RoleName.officer.value: frozenset({
        P["VIEW_DASHBOARD"],

        P["VIEW_MEMBERS"], P["CREATE_MEMBER"], P["EDIT_MEMBER"],
        P["ARCHIVE_MEMBER"],

        P["VIEW_PAYMENTS"], P["CREATE_PAYMENT"], P["EDIT_PAYMENT"],
        P["EXPORT_PAYMENT"],

        P["VIEW_SERVICES"], P["APPROVE_SERVICE"], P["REJECT_SERVICE"],

        P["VIEW_REPORTS"], P["GENERATE_REPORT"], P["EXPORT_REPORT"],
        P["MANAGE_TEMPLATES"],

        P["VIEW_NOTIFICATIONS"], P["SEND_NOTIFICATIONS"],

        P["VIEW_DOCUMENTS"], P["MANAGE_DOCUMENTS"],
    }),

    # =====================================================
    # ENCODER — data entry on members and payments
    # =====================================================
    RoleName.encoder.value: frozenset({
        P["VIEW_DASHBOARD"],

        P["VIEW_MEMBERS"], P["CREATE_MEMBER"], P["EDIT_MEMBER"],

        P["VIEW_PAYMENTS"], P["CREATE_PAYMENT"], P["EDIT_PAYMENT"],

        P["VIEW_SERVICES"],
        P["VIEW_REPORTS"],
        P["VIEW_NOTIFICATIONS"],

        P["VIEW_DOCUMENTS"], P["MANAGE_DOCUMENTS"],
    }),

    # =====================================================
    # VIEWER — read only
    # =====================================================
    RoleName.viewer.value: frozenset({
        P["VIEW_DASHBOARD"],
        P["VIEW_MEMBERS"],
        P["VIEW_PAYMENTS"],
        P["VIEW_SERVICES"],
        P["VIEW_REPORTS"],
        P["VIEW_NOTIFICATIONS"],
        P["VIEW_DOCUMENTS"],
    }),
}


# ============================================
# MODULE → PERMISSIONS MAP
# ============================================
MODULE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "Dashboard": frozenset({P["VIEW_DASHBOARD"]}),
    "Senior Citizens": frozenset({
        P["VIEW_MEMBERS"], P["CREATE_MEMBER"], P["EDIT_MEMBER"],
        P["DELETE_MEMBER"], P["ARCHIVE_MEMBER"],
    }),
    "Payments": frozenset({
        P["VIEW_PAYMENTS"], P["CREATE_PAYMENT"], P["EDIT_PAYMENT"],
        P["DELETE_PAYMENT"], P["EXPORT_PAYMENT"],
    }),
    "Services": frozenset({
        P["VIEW_SERVICES"], P["APPROVE_SERVICE"], P["REJECT_SERVICE"],
        P["DELETE_SERVICE"],
    }),
    "Reports": frozenset({
        P["VIEW_REPORTS"], P["GENERATE_REPORT"], P["EXPORT_REPORT"],
        P["DELETE_REPORT"], P["MANAGE_TEMPLATES"],
    }),
    "Notifications": frozenset({
        P["VIEW_NOTIFICATIONS"], P["SEND_NOTIFICATIONS"],
    }),
    "Documents": frozenset({
        P["VIEW_DOCUMENTS"], P["MANAGE_DOCUMENTS"], P["DELETE_DOCUMENTS"],
    }),
    "Access Control": frozenset({
        P["MANAGE_USERS"], P["MANAGE_ROLES"], P["VIEW_AUDIT_LOG"],
        P["MANAGE_PERMISSIONS"],
    }),
}


# Navigation module id → catalog module name
CATALOG_MODULE_BY_ID: Dict[str, str] = {
    "dashboard": "Dashboard",
    "senior_citizens": "Senior Citizens",
    "payments": "Payments",
    "services": "Services",
    "reports": "Reports",
    "notifications": "Notifications",
    "documents": "Documents",
    "access_control": "Access Control",
}


# ============================================
# LOOKUPS
# ============================================
def builtin_role_name(role: str) -> Optional[str]:
    """
    Catalog spelling of a built-in role, matched case-insensitively
    like the role store and the Super Admin check:
        " viewer " → "Viewer"
    """
    if not isinstance(role, str) or not role.strip():
        return None
    for name in ROLE_PERMISSIONS:
        if same_role_name(name, role):
            return name
    return None


def permissions_for_role(role: str) -> FrozenSet[str]:
    """Static token set for a role. Unknown or empty role → deny-all."""
    if not role:
        return frozenset()
    if is_super_admin(role):
        return ALL_TOKENS
    name = builtin_role_name(role)
    return ROLE_PERMISSIONS[name] if name else frozenset()


def module_tokens(module_name: str) -> FrozenSet[str]:
    """Tokens scoped to one catalog module. Unknown module → empty set."""
    if not module_name:
        return frozenset()
    return MODULE_PERMISSIONS.get(module_name, frozenset())


def is_builtin_role(role: str) -> bool:
    return builtin_role_name(role) is not None or is_super_admin(role)
