# core/normalization.py

"""
Role record → canonical module permission map.

Stored records come in several shapes (bare booleans, {"view": ...},
arbitrary action maps, or a legacy flat `modules` list). They are
reduced here to one shape:

    {"dashboard": {"view": True}, "payments": {"view": False}, ...}

Nothing past this module ever sees the raw shapes.
"""

from typing import Any, Dict

from core.navigation import (
    ACCESS_CONTROL_MODULE_ID,
    GRANTABLE_MODULE_IDS,
    resolve_module_key,
)
from models.role import RoleRecord

CanonicalMap = Dict[str, Dict[str, bool]]


def deny_all_map() -> CanonicalMap:
    """Every grantable module present and set to view=False."""
    return {module_id: {"view": False} for module_id in GRANTABLE_MODULE_IDS}


def normalize_role_record(record: Any) -> CanonicalMap:
    """
    Build the canonical map for a role record.

    `record` may be a RoleRecord, the raw dict from the store, a bare
    modulePermissions mapping that is already canonical, or None.
    Malformed input yields the deny-all map, never an exception.
    """
    if isinstance(record, dict) and not _looks_like_record(record):
        record = {"module_permissions": record}

    role = RoleRecord.from_raw(record)

    normalized: CanonicalMap = {}
    for raw_key, descriptor in role.descriptors().items():
        key = resolve_module_key(raw_key)
        if not key or key == ACCESS_CONTROL_MODULE_ID:
            continue

        # Two raw keys may land on the same module ("Payments" and "payments")
        already = normalized.get(key, {}).get("view", False)
        normalized[key] = {"view": already or descriptor.allows_view}

    for module_id in GRANTABLE_MODULE_IDS:
        normalized.setdefault(module_id, {"view": False})

    return normalized


def granted_modules(canonical: CanonicalMap) -> list:
    return [key for key, value in canonical.items() if value.get("view")]


_RECORD_KEYS = frozenset({
    "id", "role_name", "roleName", "name", "description",
    "module_permissions", "modulePermissions", "modules",
    "updated_at", "updatedAt", "updated_by", "updatedBy",
    "created_at", "createdAt", "created_by", "createdBy",
})


def _looks_like_record(data: dict) -> bool:
    # An empty dict is an empty record, not an empty permissions map
    if not data:
        return True
    return any(key in _RECORD_KEYS for key in data)
