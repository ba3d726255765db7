# core/session.py

"""
Per-principal session state.

A SessionContext owns the current role and the Evaluator built for it.
The only way to change either is `await role_changed(role)`, which
fetches the role record, normalizes it, and swaps the evaluator in a
single assignment. Readers see the old evaluator or the new one,
never a half-built map.
"""

from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from core.config import settings
from core.errors import RoleStoreError
from core.logging_config import logger
from core.normalization import deny_all_map, normalize_role_record
from core.policies import DENY_ALL_EVALUATOR, DynamicRecordPolicy, Evaluator, select_policy
from core.role_store import RoleStore, fetch_role_record
from core.roles import is_super_admin, same_role_name


class Principal(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


SessionListener = Callable[["SessionContext"], None]


class SessionContext:

    def __init__(self, principal: Optional[Principal] = None):
        self.principal = principal
        self.evaluator: Evaluator = DENY_ALL_EVALUATOR
        self.loading = False
        self.pending_role: Optional[str] = None
        self._generation = 0
        self._listeners: List[SessionListener] = []

    # ---------------------------------------------------------
    # State
    # ---------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @property
    def role(self) -> Optional[str]:
        return self.evaluator.role

    @property
    def is_super_admin(self) -> bool:
        return self.evaluator.is_super_admin

    def has_module_access(self, module_id: str, action: str = "view") -> bool:
        if not self.is_authenticated:
            return False
        return self.evaluator.has_module_access(module_id, action)

    def get_first_accessible_path(self) -> Optional[str]:
        if not self.is_authenticated:
            return None
        return self.evaluator.get_first_accessible_path()

    # ---------------------------------------------------------
    # Listeners
    # ---------------------------------------------------------
    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning(f"Session listener failed: {e}")

    # ---------------------------------------------------------
    # Transitions
    # ---------------------------------------------------------
    async def role_changed(self, role: Optional[str], store: RoleStore) -> Evaluator:
        """
        Rebuild permissions for `role`.

        No retry: a failed fetch leaves the deny-all map in place until
        the next role change or explicit reload.
        """
        self._generation += 1
        generation = self._generation

        if self.principal is not None:
            self.principal = self.principal.model_copy(update={"role": role})

        if not role:
            return self._apply(generation, DENY_ALL_EVALUATOR)

        if is_super_admin(role):
            return self._apply(generation, Evaluator(role, DynamicRecordPolicy({})))

        self.loading = True
        self.pending_role = role
        try:
            record = await run_in_threadpool(fetch_role_record, store, role)
            if record is None:
                logger.info(f"No stored record for role '{role}'")
            canonical = normalize_role_record(record) if record is not None else None
            evaluator = Evaluator(role, select_policy(role, record, canonical))
        except RoleStoreError as e:
            logger.error(f"Failed to load role permissions for '{role}': {e}")
            evaluator = Evaluator(role, DynamicRecordPolicy(deny_all_map()))
        except Exception as e:
            logger.error(f"Unexpected error loading role '{role}': {e}", exc_info=True)
            evaluator = Evaluator(role, DynamicRecordPolicy(deny_all_map()))

        return self._apply(generation, evaluator)

    def _apply(self, generation: int, evaluator: Evaluator) -> Evaluator:
        # A newer role change started while this one was loading
        if generation != self._generation:
            return self.evaluator

        self.evaluator = evaluator
        self.loading = False
        self.pending_role = None
        logger.info(f"Permissions ready: {evaluator!r}")
        self._notify()
        return evaluator

    async def reload(self, store: RoleStore) -> Evaluator:
        if self.principal is None:
            return self.evaluator
        return await self.role_changed(self.principal.role, store)

    def logout(self):
        self._generation += 1
        self.principal = None
        self.evaluator = DENY_ALL_EVALUATOR
        self.loading = False
        self.pending_role = None
        self._notify()


class _NoSession(SessionContext):
    """Shared stand-in for 'nobody is logged in'. Deny-all and immutable."""

    async def role_changed(self, role, store):
        return DENY_ALL_EVALUATOR

    def logout(self):
        return None

    def subscribe(self, listener):
        return lambda: None

    def __repr__(self):
        return "<NO_SESSION>"


NO_SESSION = _NoSession()


# ============================================================
# Registry (process-wide)
# ============================================================
class SessionEntry:
    """A live session and the time it goes idle."""

    def __init__(self, context: SessionContext, ttl_seconds: int):
        self.context = context
        self.touch(ttl_seconds)

    def touch(self, ttl_seconds: int):
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        return datetime.now() >= self.expires_at


class SessionRegistry:
    """
    Sessions by user id, expired after `ttl_seconds` without a request.

    An expired session is rebuilt from the store on the user's next
    request, so record edits made outside this service apply by then.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = Lock()

    def _live_entry(self, user_id: str) -> Optional[SessionEntry]:
        # Caller holds the lock
        entry = self._sessions.get(user_id)
        if entry is None:
            return None
        if entry.is_expired():
            del self._sessions[user_id]
            entry.context.logout()
            logger.info(f"Session expired for user {user_id}")
            return None
        return entry

    def get(self, user_id: Optional[str]) -> SessionContext:
        if not user_id:
            return NO_SESSION
        with self._lock:
            entry = self._live_entry(user_id)
            return entry.context if entry is not None else NO_SESSION

    async def ensure(self, principal: Principal, store: RoleStore) -> SessionContext:
        """
        Session for an authenticated principal. Rebuilds permissions when
        the principal is new, their session expired, or their role differs
        from the loaded one.
        """
        with self._lock:
            entry = self._live_entry(principal.user_id)
            if entry is None:
                context = SessionContext(principal)
                self._sessions[principal.user_id] = SessionEntry(context, self.ttl_seconds)
                needs_load = True
            else:
                entry.touch(self.ttl_seconds)
                context = entry.context
                if context.loading and same_role_name(context.pending_role, principal.role):
                    needs_load = False
                else:
                    needs_load = context.evaluator.role != principal.role
                    context.principal = principal

        if needs_load:
            await context.role_changed(principal.role, store)
        return context

    async def refresh_role(self, role_name: str, store: RoleStore) -> int:
        """Rebuild every live session holding `role_name` after its record changed."""
        with self._lock:
            affected = [
                entry.context for entry in self._sessions.values()
                if not entry.is_expired()
                and entry.context.principal is not None
                and same_role_name(entry.context.principal.role, role_name)
            ]
        for context in affected:
            await context.reload(store)
        return len(affected)

    def prune(self) -> int:
        """Drop expired sessions. Returns how many were removed."""
        with self._lock:
            expired = [user_id for user_id, entry in self._sessions.items() if entry.is_expired()]
            for user_id in expired:
                self._live_entry(user_id)
        return len(expired)

    def invalidate(self, user_id: Optional[str]) -> bool:
        with self._lock:
            entry = self._sessions.pop(user_id, None) if user_id else None
        if entry is None:
            return False
        entry.context.logout()
        logger.info(f"Session invalidated for user {user_id}")
        return True

    def clear(self):
        with self._lock:
            entries = list(self._sessions.values())
            self._sessions.clear()
        for entry in entries:
            entry.context.logout()

    def __len__(self):
        with self._lock:
            return len(self._sessions)


_registry = SessionRegistry()


def get_session_registry() -> SessionRegistry:
    return _registry
