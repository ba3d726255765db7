# routers/auth.py

from fastapi import APIRouter, Depends

from core.logging_config import logger
from core.session import get_session_registry
from dependencies.auth import CurrentUser, get_current_user

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# -----------------------------------------------------
# POST /auth/logout
# Credentials stay with Supabase; this drops the cached
# role permissions so the next request starts from zero.
# -----------------------------------------------------
@router.post("/logout", summary="End the caller's session")
def logout(current_user: CurrentUser = Depends(get_current_user)):
    dropped = get_session_registry().invalidate(current_user.id)
    logger.info(f"Logout for {current_user.email} (session cached: {dropped})")
    return {"status": "logged_out"}
