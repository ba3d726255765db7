# core/roles.py

"""
Role name helpers shared by the catalog, the role store and the session.
"""

import re
from typing import Optional

from core.config import settings

_WHITESPACE = re.compile(r"\s+")


def normalize_role_key(role_name: Optional[str]) -> str:
    """
    Storage key for a role name:
        "Senior Officer " → "senior_officer"
    """
    if not role_name:
        return ""
    return _WHITESPACE.sub("_", role_name.strip().lower())


def is_super_admin(role_name: Optional[str]) -> bool:
    """
    Super Admin is recognized by name only (case-insensitive),
    never by a flag on the record.
    """
    if not isinstance(role_name, str):
        return False
    return role_name.strip().lower() == settings.SUPER_ADMIN_ROLE.lower()


def same_role_name(a: Optional[str], b: Optional[str]) -> bool:
    if not isinstance(a, str) or not isinstance(b, str):
        return False
    return a.strip().lower() == b.strip().lower()
