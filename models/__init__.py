# -------------------------
# Role Models
# -------------------------
from .role import (
    PermissionDescriptor,
    RoleRecord,
    ModuleGrant,
    RoleUpsert,
    RoleRead,
)

# -------------------------
# Enums
# -------------------------
from .enums import (
    RoleName,
    ModuleAction,
    DescriptorKind,
    GateState,
)

__all__ = [
    "PermissionDescriptor",
    "RoleRecord",
    "ModuleGrant",
    "RoleUpsert",
    "RoleRead",
    "RoleName",
    "ModuleAction",
    "DescriptorKind",
    "GateState",
]
