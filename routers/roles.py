# routers/roles.py

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from core.errors import RoleStoreError, handle_supabase_error
from core.logging_config import logger
from core.navigation import ACCESS_CONTROL_MODULE_ID
from core.normalization import granted_modules, normalize_role_record
from core.permission_helpers import requires_permission
from core.role_store import RoleStore, get_role_store
from core.roles import is_super_admin
from core.session import get_session_registry
from dependencies.auth import CurrentUser, requires_module
from models.role import RoleRead, RoleRecord, RoleUpsert

router = APIRouter(
    prefix="/roles",
    tags=["Role Management"],
)


def _to_read(record: RoleRecord) -> RoleRead:
    canonical = normalize_role_record(record)
    return RoleRead(
        id=record.id or "",
        role_name=record.display_name,
        description=record.description or "",
        module_permissions=canonical,
        granted_modules=granted_modules(canonical),
    )


# -----------------------------------------------------
# GET /roles
# -----------------------------------------------------
@router.get(
    "",
    response_model=List[RoleRead],
    summary="List role records",
    dependencies=[Depends(requires_module(ACCESS_CONTROL_MODULE_ID))],
)
def list_roles(store: RoleStore = Depends(get_role_store)):
    try:
        rows = store.list_all()
    except RoleStoreError as e:
        raise handle_supabase_error(e, "List roles")

    return [_to_read(RoleRecord.from_raw(row)) for row in rows if isinstance(row, dict)]


# -----------------------------------------------------
# GET /roles/{role_id}
# -----------------------------------------------------
@router.get(
    "/{role_id}",
    response_model=RoleRead,
    summary="Read one role record",
    dependencies=[Depends(requires_module(ACCESS_CONTROL_MODULE_ID))],
)
def get_role(role_id: str, store: RoleStore = Depends(get_role_store)):
    try:
        row = store.get(role_id)
    except RoleStoreError as e:
        raise handle_supabase_error(e, "Read role")

    if row is None:
        raise HTTPException(404, f"Role '{role_id}' not found")
    return _to_read(RoleRecord.from_raw(row))


# -----------------------------------------------------
# PUT /roles/{role_id}
# Create or replace; permissions are always saved in canonical shape
# -----------------------------------------------------
@router.put("/{role_id}", response_model=RoleRead, summary="Create or update a role record")
async def upsert_role(
    role_id: str,
    payload: RoleUpsert,
    store: RoleStore = Depends(get_role_store),
    current_user: CurrentUser = Depends(requires_permission("manage_roles")),
):
    if is_super_admin(payload.role_name):
        raise HTTPException(400, "Super Admin access is implicit and cannot be edited")

    canonical = normalize_role_record({
        "module_permissions": payload.module_permissions,
        "modules": payload.modules,
    })

    record = {
        "role_name": payload.role_name.strip(),
        "description": payload.description or "",
        "module_permissions": canonical,
        "updated_at": datetime.now(timezone.utc).isoformat(),
        "updated_by": current_user.email,
    }

    try:
        saved = store.save(role_id, record)
    except RoleStoreError as e:
        raise handle_supabase_error(e, "Save role")

    logger.info(
        f"Role '{record['role_name']}' saved by {current_user.email} "
        f"({len(granted_modules(canonical))} modules granted)"
    )

    refreshed = await get_session_registry().refresh_role(record["role_name"], store)
    if refreshed:
        logger.info(f"Rebuilt permissions for {refreshed} active session(s)")

    return _to_read(RoleRecord.from_raw({**saved, "id": role_id}))


# -----------------------------------------------------
# DELETE /roles/{role_id}
# -----------------------------------------------------
@router.delete("/{role_id}", summary="Delete a role record")
async def delete_role(
    role_id: str,
    store: RoleStore = Depends(get_role_store),
    current_user: CurrentUser = Depends(requires_permission("manage_roles")),
):
    try:
        row = store.get(role_id)
        if row is None:
            raise HTTPException(404, f"Role '{role_id}' not found")
        store.delete(role_id)
    except RoleStoreError as e:
        raise handle_supabase_error(e, "Delete role")

    role_name = RoleRecord.from_raw(row).display_name
    logger.info(f"Role '{role_name}' deleted by {current_user.email}")

    await get_session_registry().refresh_role(role_name, store)
    return {"status": "deleted", "id": role_id}
