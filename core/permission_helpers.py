# core/permission_helpers.py

from typing import Dict, Iterable, List, Optional, FrozenSet

from fastapi import Depends, HTTPException

from core.permissions import MODULE_PERMISSIONS, module_tokens, permissions_for_role
from core.roles import is_super_admin
from models.enums import ModuleAction


# Known actions map to their token prefix; anything else is used literally
ACTION_SUFFIXES: Dict[str, str] = {action.value: action.value for action in ModuleAction}

ACCESSIBLE_MODULES: List[str] = [
    "Dashboard",
    "Senior Citizens",
    "Payments",
    "Services",
    "Reports",
    "Notifications",
    "Documents",
]


# -----------------------------------------------------
# Token lookups (static catalog)
# -----------------------------------------------------
def get_user_permissions(role: Optional[str]) -> FrozenSet[str]:
    return permissions_for_role(role)


def has_permission(role: Optional[str], permission: str) -> bool:
    if not role or not isinstance(permission, str):
        return False
    return permission in permissions_for_role(role)


def has_any_permission(role: Optional[str], permissions: Iterable[str]) -> bool:
    if not role or not isinstance(permissions, (list, tuple, set, frozenset)):
        return False
    granted = permissions_for_role(role)
    return any(p in granted for p in permissions)


def has_all_permissions(role: Optional[str], permissions: Iterable[str]) -> bool:
    """
    True when every requested token is held.
    An empty request list is vacuously satisfied, but only for a role
    that holds something; unknown roles are always denied.
    """
    if not role or not isinstance(permissions, (list, tuple, set, frozenset)):
        return False
    granted = permissions_for_role(role)
    if not granted:
        return False
    return all(p in granted for p in permissions)


# -----------------------------------------------------
# Module-level checks (static catalog)
# -----------------------------------------------------
def action_suffix(action: Optional[str]) -> str:
    action = (action or ModuleAction.view.value).strip().lower()
    return ACTION_SUFFIXES.get(action, action)


def can_access_module(role: Optional[str], module: str, action: str = "view") -> bool:
    """
    Can `role` perform `action` on a catalog module (e.g. "Payments")?

    Catalog modules are matched against their own token set by action
    prefix (edit → edit_payment). Labels outside the catalog fall back
    to any held token that mentions both the module and the action.
    """
    if not role or not isinstance(module, str) or not module.strip():
        return False

    granted = permissions_for_role(role)
    if not granted:
        return False

    suffix = action_suffix(action)

    if module in MODULE_PERMISSIONS:
        scoped = granted & module_tokens(module)
        return any(token.startswith(f"{suffix}_") for token in scoped)

    module_key = "_".join(module.lower().split())
    return any(module_key in token and suffix in token for token in granted)


def get_accessible_modules(role: Optional[str]) -> List[str]:
    return [m for m in ACCESSIBLE_MODULES if can_access_module(role, m, "view")]


def get_available_actions(role: Optional[str], module: str) -> Dict[str, bool]:
    """Flags for which action buttons a module screen should render."""
    return {action.value: can_access_module(role, module, action.value) for action in ModuleAction}


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(permission: str):
    """
    Usage:
        @router.put("/{role_id}", dependencies=[Depends(requires_permission("manage_roles"))])

    Super Admin always passes; other roles need the token in the static catalog.
    """
    from dependencies.auth import get_current_user, CurrentUser

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if is_super_admin(current_user.role):
            return current_user
        if not has_permission(current_user.role, permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required"
            )
        return current_user

    return dependency
