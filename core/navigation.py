# core/navigation.py

"""
Module registry: every navigable module of the admin app, in sidebar order.

The order matters. First-accessible-path resolution scans it top to bottom.
"""

import re
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class NavigationModule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    path: str


ACCESS_CONTROL_MODULE_ID = "access_control"
DASHBOARD_MODULE_ID = "dashboard"

NAVIGATION_MODULES: Tuple[NavigationModule, ...] = (
    NavigationModule(id="dashboard", label="Dashboard", path="/dashboard"),
    NavigationModule(id="senior_citizens", label="Senior Citizen Management", path="/citizens"),
    NavigationModule(id="payments", label="Payment Management", path="/payments"),
    NavigationModule(id="notifications", label="Notification Management", path="/notifications"),
    NavigationModule(id="services", label="Benefit Tracking", path="/services"),
    NavigationModule(id="reports", label="Dynamic Reporting", path="/reports"),
    NavigationModule(id="documents", label="Document Manager", path="/documents"),
    NavigationModule(id=ACCESS_CONTROL_MODULE_ID, label="Role Based Access Control", path="/roles"),
)

MODULE_BY_ID: Dict[str, NavigationModule] = {m.id: m for m in NAVIGATION_MODULES}
MODULE_ID_BY_LABEL: Dict[str, str] = {m.label: m.id for m in NAVIGATION_MODULES}
MODULE_ID_BY_PATH: Dict[str, str] = {m.path: m.id for m in NAVIGATION_MODULES}

# Modules a dynamic role record can grant (access control is reserved)
GRANTABLE_MODULE_IDS: Tuple[str, ...] = tuple(
    m.id for m in NAVIGATION_MODULES if m.id != ACCESS_CONTROL_MODULE_ID
)

_WHITESPACE = re.compile(r"\s+")


def resolve_module_key(raw) -> Optional[str]:
    """
    Map a raw module identifier to its canonical key.

    Order: exact id, exact label, then lowercase + whitespace → "_".
    Identifiers matching nothing still get the normalized key back,
    so callers can carry them along without failing.
    """
    if not isinstance(raw, str):
        return None

    if raw in MODULE_BY_ID:
        return raw
    if raw in MODULE_ID_BY_LABEL:
        return MODULE_ID_BY_LABEL[raw]

    normalized = _WHITESPACE.sub("_", raw.strip().lower())
    return normalized or None


def module_for_path(path: Optional[str]) -> Optional[NavigationModule]:
    if not path:
        return None
    module_id = MODULE_ID_BY_PATH.get(path.rstrip("/") or "/")
    return MODULE_BY_ID.get(module_id) if module_id else None
