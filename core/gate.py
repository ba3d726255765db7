# core/gate.py

"""
Capability gate: the route-level decision made before protected content
is served.

    LOADING                → permissions still being built, no decision
    UNAUTHENTICATED        → go to the entry surface, remember where we were
    AUTHENTICATED_DENIED   → go to the first module the role can see,
                             or the entry surface if there is none
    AUTHENTICATED_ALLOWED  → render
"""

from typing import Optional

from pydantic import BaseModel

from core.config import settings
from core.session import SessionContext
from models.enums import GateState


class GateDecision(BaseModel):
    state: GateState
    module_id: Optional[str] = None
    redirect_to: Optional[str] = None
    preserved_from: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state == GateState.allowed


def evaluate_gate(session: SessionContext, module_id: str, requested_path: Optional[str] = None) -> GateDecision:
    if session.loading:
        return GateDecision(state=GateState.loading, module_id=module_id)

    if not session.is_authenticated:
        return GateDecision(
            state=GateState.unauthenticated,
            module_id=module_id,
            redirect_to=settings.LOGIN_PATH,
            preserved_from=requested_path,
        )

    if session.has_module_access(module_id, "view"):
        return GateDecision(state=GateState.allowed, module_id=module_id)

    fallback = session.get_first_accessible_path()
    if not fallback or fallback == requested_path:
        fallback = settings.LOGIN_PATH

    return GateDecision(state=GateState.denied, module_id=module_id, redirect_to=fallback)
