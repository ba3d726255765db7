# core/role_store.py

"""
Role record stores.

The roles table holds one row per role keyed by the normalized role
name (see core.roles.normalize_role_key). Custom roles created from the
admin screen may use other keys, so lookups fall back to a full scan
matching on the display name.
"""

from threading import Lock
from typing import Dict, List, Optional, Protocol

from core.config import settings
from core.errors import RoleStoreError
from core.logging_config import logger
from core.roles import normalize_role_key, same_role_name
from core.supabase_client import get_supabase_client
from models.role import RoleRecord


class RoleStore(Protocol):
    def get(self, key: str) -> Optional[dict]:
        ...

    def list_all(self) -> List[dict]:
        ...

    def save(self, key: str, record: dict) -> dict:
        ...

    def delete(self, key: str) -> bool:
        ...


# ============================================================
# Supabase-backed store
# ============================================================
class SupabaseRoleStore:
    """
    Row layout:
        id                  text primary key
        role_name           text
        description         text
        module_permissions  jsonb
        modules             jsonb   (legacy)
        updated_at          timestamptz
        updated_by          text
    """

    def __init__(self, client=None, table: str = None):
        self._client = client
        self.table = table or settings.ROLES_TABLE

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        if self._client is None:
            raise RoleStoreError("Supabase client not configured")
        return self._client

    def get(self, key: str) -> Optional[dict]:
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("id", key)
                .limit(1)
                .execute()
            )
        except RoleStoreError:
            raise
        except Exception as e:
            raise RoleStoreError(f"Failed to read role '{key}'", e) from e

        rows = result.data or []
        return rows[0] if rows else None

    def list_all(self) -> List[dict]:
        try:
            result = self.client.table(self.table).select("*").execute()
        except RoleStoreError:
            raise
        except Exception as e:
            raise RoleStoreError("Failed to list roles", e) from e
        return result.data or []

    def save(self, key: str, record: dict) -> dict:
        payload = {**record, "id": key}
        try:
            result = self.client.table(self.table).upsert(payload).execute()
        except RoleStoreError:
            raise
        except Exception as e:
            raise RoleStoreError(f"Failed to save role '{key}'", e) from e
        rows = result.data or []
        return rows[0] if rows else payload

    def delete(self, key: str) -> bool:
        try:
            result = self.client.table(self.table).delete().eq("id", key).execute()
        except RoleStoreError:
            raise
        except Exception as e:
            raise RoleStoreError(f"Failed to delete role '{key}'", e) from e
        return bool(result.data)


# ============================================================
# In-memory store (tests, local development)
# ============================================================
class InMemoryRoleStore:
    def __init__(self, records: Optional[Dict[str, dict]] = None):
        self._records: Dict[str, dict] = {k: dict(v) for k, v in (records or {}).items()}
        self._lock = Lock()

    def get(self, key: str) -> Optional[dict]:
        with self._lock:
            record = self._records.get(key)
            return {**record, "id": key} if record is not None else None

    def list_all(self) -> List[dict]:
        with self._lock:
            return [{**record, "id": key} for key, record in self._records.items()]

    def save(self, key: str, record: dict) -> dict:
        with self._lock:
            self._records[key] = dict(record)
            return {**record, "id": key}

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._records.pop(key, None) is not None


# ============================================================
# Lookup helpers
# ============================================================
def fetch_role_record(store: RoleStore, role_name: str) -> Optional[RoleRecord]:
    """
    Find the record for a role name.

    1. direct lookup by normalized key ("Senior Officer" → "senior_officer")
    2. full scan comparing role_name / name case-insensitively

    Returns None when nothing matches. Store failures raise RoleStoreError.
    """
    key = normalize_role_key(role_name)
    if not key:
        return None

    raw = store.get(key)
    if raw is not None:
        return RoleRecord.from_raw(raw)

    for row in store.list_all():
        if not isinstance(row, dict):
            continue
        candidate = row.get("role_name") or row.get("roleName") or row.get("name")
        if same_role_name(candidate, role_name):
            logger.info(f"Role '{role_name}' resolved by name scan (id={row.get('id')})")
            return RoleRecord.from_raw(row)

    return None


_default_store: Optional[RoleStore] = None


def get_role_store() -> RoleStore:
    """Process-wide store; FastAPI routes take it via Depends(get_role_store)."""
    global _default_store
    if _default_store is None:
        _default_store = SupabaseRoleStore()
    return _default_store
