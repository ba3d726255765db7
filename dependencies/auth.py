from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from supabase import Client

from core.supabase_client import get_supabase_client
from core.role_store import RoleStore, get_role_store
from core.session import NO_SESSION, Principal, SessionContext, get_session_registry
from core.gate import evaluate_gate
from core.logging_config import logger
from models.enums import GateState


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID
    email: str
    role: Optional[str] = None      # role name as stored in user_metadata

    display_name: Optional[str] = None

    def to_principal(self) -> Principal:
        return Principal(user_id=self.id, email=self.email, role=self.role)


# ============================================================
# AUTH DECODING (Supabase: validates JWT + fetches metadata)
# ============================================================
def authenticate_token(token: str) -> CurrentUser:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client: Client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
        if not auth_resp or not auth_resp.user:
            raise unauthorized
        auth_user = auth_resp.user
    except HTTPException:
        raise
    except Exception:
        raise unauthorized

    email = auth_user.email
    metadata = auth_user.user_metadata or {}

    if not email:
        raise unauthorized

    # No role metadata → no role (deny-all), never a default grant
    role = metadata.get("role")
    if not isinstance(role, str) or not role.strip():
        role = None

    return CurrentUser(
        id=auth_user.id,
        email=email,
        role=role.strip() if role else None,
        display_name=metadata.get("display_name") or metadata.get("full_name"),
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    return authenticate_token(credentials.credentials)


# ============================================================
# OPTIONAL AUTHENTICATION (for the capability gate)
# ============================================================
def get_optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False)),
) -> Optional[CurrentUser]:
    """
    Returns CurrentUser if a valid token was provided, None otherwise.
    Does not raise if the token is missing or invalid.
    """
    if not credentials:
        return None

    try:
        return authenticate_token(credentials.credentials)
    except HTTPException:
        return None


# ============================================================
# SESSION CONTEXT
# ============================================================
async def get_session(
    current_user: CurrentUser = Depends(get_current_user),
    store: RoleStore = Depends(get_role_store),
) -> SessionContext:
    return await get_session_registry().ensure(current_user.to_principal(), store)


async def get_optional_session(
    current_user: Optional[CurrentUser] = Depends(get_optional_auth),
    store: RoleStore = Depends(get_role_store),
) -> SessionContext:
    if current_user is None:
        return NO_SESSION
    return await get_session_registry().ensure(current_user.to_principal(), store)


# ============================================================
# CAPABILITY GATE (route guard)
# ============================================================
_GATE_STATUS = {
    GateState.loading: status.HTTP_503_SERVICE_UNAVAILABLE,
    GateState.unauthenticated: status.HTTP_401_UNAUTHORIZED,
    GateState.denied: status.HTTP_403_FORBIDDEN,
}


def requires_module(module_id: str):
    """
    Usage:
        @router.get("/", dependencies=[Depends(requires_module("payments"))])

    Fails with the gate decision as the error detail so clients can
    follow `redirect_to` (and return to `preserved_from` after login).
    """

    async def dependency(
        request: Request,
        session: SessionContext = Depends(get_optional_session),
    ) -> SessionContext:
        decision = evaluate_gate(session, module_id, request.url.path)
        if decision.allowed:
            return session

        if decision.state == GateState.denied:
            logger.info(f"Module '{module_id}' denied for role '{session.role}'")

        headers = {"Retry-After": "1"} if decision.state == GateState.loading else None
        raise HTTPException(
            status_code=_GATE_STATUS[decision.state],
            detail=decision.model_dump(mode="json"),
            headers=headers,
        )

    return dependency
