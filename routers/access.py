# routers/access.py

from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from core.gate import GateDecision, evaluate_gate
from core.permission_helpers import (
    can_access_module,
    get_accessible_modules,
    get_available_actions,
    get_user_permissions,
    has_all_permissions,
    has_any_permission,
)
from core.role_store import RoleStore, get_role_store
from core.session import SessionContext
from dependencies.auth import get_optional_session, get_session

router = APIRouter(
    prefix="/access",
    tags=["Access Control"],
)


# ============================================================
# Pydantic Models
# ============================================================
class SessionAccessRead(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    is_super_admin: bool
    policy: str
    loading: bool
    module_permissions: Dict[str, Dict[str, bool]]
    first_accessible_path: Optional[str] = None


class ModuleAccessRead(BaseModel):
    module_id: str
    action: str
    allowed: bool


class GateRequest(BaseModel):
    module_id: str
    path: Optional[str] = None


class PermissionCheck(BaseModel):
    role: str
    permissions: List[str] = Field(default_factory=list)
    mode: Literal["any", "all"] = "all"


def _session_summary(session: SessionContext) -> SessionAccessRead:
    return SessionAccessRead(
        user_id=session.principal.user_id,
        email=session.principal.email,
        role=session.role,
        is_super_admin=session.is_super_admin,
        policy=session.evaluator.policy.name,
        loading=session.loading,
        module_permissions=session.evaluator.module_map(),
        first_accessible_path=session.get_first_accessible_path(),
    )


# ============================================================
# SESSION — map-based checks for the caller
# ============================================================
@router.get("/me", response_model=SessionAccessRead, summary="Current session permissions")
async def read_my_access(session: SessionContext = Depends(get_session)):
    return _session_summary(session)


@router.get(
    "/modules/{module_id}",
    response_model=ModuleAccessRead,
    summary="Can the caller perform an action on a module?",
)
async def check_module_access(
    module_id: str,
    action: str = Query("view"),
    session: SessionContext = Depends(get_session),
):
    return ModuleAccessRead(
        module_id=module_id,
        action=action,
        allowed=session.has_module_access(module_id, action),
    )


@router.get("/first-path", summary="First module path the caller can open")
async def read_first_accessible_path(session: SessionContext = Depends(get_session)):
    return {"path": session.get_first_accessible_path()}


@router.post("/gate", response_model=GateDecision, summary="Capability gate decision")
async def gate(payload: GateRequest, session: SessionContext = Depends(get_optional_session)):
    """
    Same decision the route guard makes, returned instead of enforced.
    Works without a token (→ UNAUTHENTICATED).
    """
    return evaluate_gate(session, payload.module_id, payload.path)


@router.post("/reload", response_model=SessionAccessRead, summary="Reload role permissions")
async def reload_access(
    session: SessionContext = Depends(get_session),
    store: RoleStore = Depends(get_role_store),
):
    await session.reload(store)
    return _session_summary(session)


# ============================================================
# CATALOG — token-based checks against the static matrix
# ============================================================
@router.get("/catalog/roles/{role}/permissions", summary="Static permission tokens for a role")
async def read_role_permissions(role: str):
    return {
        "role": role,
        "permissions": sorted(get_user_permissions(role)),
        "modules": get_accessible_modules(role),
    }


@router.post("/catalog/check", summary="Check a role against a list of tokens")
async def check_role_permissions(payload: PermissionCheck):
    if payload.mode == "any":
        allowed = has_any_permission(payload.role, payload.permissions)
    else:
        allowed = has_all_permissions(payload.role, payload.permissions)
    return {"role": payload.role, "mode": payload.mode, "allowed": allowed}


@router.get("/catalog/roles/{role}/modules/{module}", summary="Module-level action check")
async def check_role_module(role: str, module: str, action: str = Query("view")):
    return {
        "role": role,
        "module": module,
        "action": action,
        "allowed": can_access_module(role, module, action),
        "actions": get_available_actions(role, module),
    }
