# core/policies.py

"""
Access evaluation.

Two backing policies answer module-level questions:

  • StaticCatalogPolicy  — built-in roles, answered from the token matrix
                           in core.permissions (per-action granularity)
  • DynamicRecordPolicy  — role records from the store, answered from the
                           canonical {module: {"view": bool}} map
                           (every action reads the view flag)

Call sites only ever see an Evaluator. Super Admin short-circuits both.
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, FrozenSet

from core.config import settings
from core.navigation import (
    ACCESS_CONTROL_MODULE_ID,
    GRANTABLE_MODULE_IDS,
    NAVIGATION_MODULES,
    NavigationModule,
)
from core.normalization import CanonicalMap, deny_all_map
from core.permissions import CATALOG_MODULE_BY_ID, is_builtin_role
from core import permission_helpers
from core.roles import is_super_admin
from models.role import RoleRecord


# ============================================================
# Policies
# ============================================================
class AccessPolicy(ABC):
    """Answers module access for one role. Must never raise."""

    name = "policy"

    @abstractmethod
    def has_module_access(self, module_id: str, action: str = "view") -> bool:
        ...

    @abstractmethod
    def module_map(self) -> CanonicalMap:
        ...


class StaticCatalogPolicy(AccessPolicy):
    name = "static"

    def __init__(self, role: str):
        self.role = role

    def has_module_access(self, module_id: str, action: str = "view") -> bool:
        # Role management stays with Super Admin, whatever the matrix holds
        if module_id == ACCESS_CONTROL_MODULE_ID:
            return False
        catalog_module = CATALOG_MODULE_BY_ID.get(module_id)
        if catalog_module is None:
            return False
        return permission_helpers.can_access_module(self.role, catalog_module, action)

    def module_map(self) -> CanonicalMap:
        return {
            module_id: {"view": self.has_module_access(module_id)}
            for module_id in GRANTABLE_MODULE_IDS
        }


class DynamicRecordPolicy(AccessPolicy):
    name = "dynamic"

    def __init__(self, canonical: Optional[Mapping] = None):
        # Read-only snapshot; a role change builds a new policy instead
        self._map = MappingProxyType(
            {key: dict(value) if isinstance(value, dict) else value
             for key, value in (canonical or {}).items()}
        )

    def has_module_access(self, module_id: str, action: str = "view") -> bool:
        grant = self._map.get(module_id)
        if grant is None:
            return False
        if isinstance(grant, bool):
            return grant
        if not isinstance(grant, dict):
            return False
        # Non-view actions follow the view toggle on this path
        return bool(grant.get("view"))

    def module_map(self) -> CanonicalMap:
        return {key: {"view": self.has_module_access(key)} for key in self._map}


def select_policy(role: Optional[str], record: Optional[RoleRecord], canonical: Optional[CanonicalMap]) -> AccessPolicy:
    """
    A stored record always wins. Built-in roles without a stored record
    fall back to the static matrix. Anything else gets nothing.
    """
    if record is not None:
        return DynamicRecordPolicy(canonical)
    if is_builtin_role(role):
        return StaticCatalogPolicy(role)
    return DynamicRecordPolicy(deny_all_map())


# ============================================================
# Evaluator
# ============================================================
class Evaluator:
    """Single capability surface for route guards and UI conditionals."""

    def __init__(self, role: Optional[str], policy: AccessPolicy):
        self.role = role
        self.policy = policy
        self.is_super_admin = is_super_admin(role)

    # ---------------- map-based ----------------
    def has_module_access(self, module_id: str, action: str = "view") -> bool:
        if not isinstance(module_id, str) or not module_id:
            return False
        if self.is_super_admin:
            return True
        if not self.role:
            return False
        return self.policy.has_module_access(module_id, action or "view")

    def accessible_modules(self) -> List[NavigationModule]:
        return [m for m in NAVIGATION_MODULES if self.has_module_access(m.id, "view")]

    def get_first_accessible_path(self) -> Optional[str]:
        if self.is_super_admin:
            return settings.DASHBOARD_PATH
        modules = self.accessible_modules()
        return modules[0].path if modules else None

    def module_map(self) -> CanonicalMap:
        if self.is_super_admin:
            return {m.id: {"view": True} for m in NAVIGATION_MODULES}
        if not self.role:
            return deny_all_map()
        return self.policy.module_map()

    # ---------------- token-based ----------------
    def has_permission(self, token: str) -> bool:
        return permission_helpers.has_permission(self.role, token)

    def has_any_permission(self, tokens: Iterable[str]) -> bool:
        return permission_helpers.has_any_permission(self.role, tokens)

    def has_all_permissions(self, tokens: Iterable[str]) -> bool:
        return permission_helpers.has_all_permissions(self.role, tokens)

    def get_user_permissions(self) -> FrozenSet[str]:
        return permission_helpers.get_user_permissions(self.role)

    def can_access_module(self, module_label: str, action: str = "view") -> bool:
        return permission_helpers.can_access_module(self.role, module_label, action)

    def __repr__(self):
        return f"<Evaluator role={self.role!r} policy={self.policy.name}>"


DENY_ALL_EVALUATOR = Evaluator(None, DynamicRecordPolicy(deny_all_map()))
