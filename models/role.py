# models/role.py

from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, AliasChoices

from models.enums import DescriptorKind


# ===============================================================
# STORED PERMISSION DESCRIPTOR (tagged variant)
# ===============================================================

class PermissionDescriptor(BaseModel):
    """
    One modulePermissions value as found in the store, tagged by shape.

        True / False            → kind=flag
        {"view": true, ...}     → kind=view
        {"edit": true}          → kind=actions
        {}, None, "yes", 3      → kind=empty
    """
    model_config = ConfigDict(frozen=True)

    kind: DescriptorKind
    view: Optional[bool] = None
    actions: Dict[str, bool] = {}

    @classmethod
    def parse(cls, raw: Any) -> "PermissionDescriptor":
        if isinstance(raw, bool):
            return cls(kind=DescriptorKind.flag, view=raw)

        if isinstance(raw, dict) and raw:
            actions = {str(k): bool(v) for k, v in raw.items()}
            if "view" in raw:
                return cls(kind=DescriptorKind.view, view=bool(raw["view"]), actions=actions)
            return cls(kind=DescriptorKind.actions, actions=actions)

        return cls(kind=DescriptorKind.empty)

    @property
    def allows_view(self) -> bool:
        if self.kind in (DescriptorKind.flag, DescriptorKind.view):
            return bool(self.view)
        if self.kind == DescriptorKind.actions:
            return any(self.actions.values())
        return False


# ===============================================================
# ROLE RECORD (as persisted)
# ===============================================================

# Fields from_raw coerces to their declared types
_SANITIZED_KEYS = (
    "id", "role_name", "roleName", "name", "description",
    "module_permissions", "modulePermissions", "modules",
)


class RoleRecord(BaseModel):
    """
    Mirrors one row of the roles table.

    Accepts both the camelCase keys written by the admin frontend
    (roleName, modulePermissions) and the snake_case column names.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    role_name: Optional[str] = Field(None, validation_alias=AliasChoices("role_name", "roleName"))
    name: Optional[str] = None
    description: Optional[str] = None

    module_permissions: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("module_permissions", "modulePermissions")
    )
    # Legacy flat list of module ids/labels, implies view access
    modules: Optional[List[str]] = None

    updated_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("updated_at", "updatedAt"))
    updated_by: Optional[str] = Field(None, validation_alias=AliasChoices("updated_by", "updatedBy"))

    @classmethod
    def from_raw(cls, raw: Any) -> "RoleRecord":
        """
        Build a record from whatever the store returned.
        Unusable fields are dropped instead of failing validation.
        """
        if isinstance(raw, RoleRecord):
            return raw
        if not isinstance(raw, dict):
            return cls()

        data = dict(raw)

        for key in ("module_permissions", "modulePermissions"):
            if key not in data:
                continue
            if isinstance(data[key], dict):
                data[key] = {k: v for k, v in data[key].items() if isinstance(k, str)}
            else:
                data.pop(key)

        if "modules" in data:
            modules = data["modules"]
            if isinstance(modules, list):
                data["modules"] = [m for m in modules if isinstance(m, str)]
            else:
                data.pop("modules")

        for key in ("id", "role_name", "roleName", "name", "description"):
            if key in data and data[key] is not None and not isinstance(data[key], str):
                data[key] = str(data[key])

        for key in ("updated_at", "updatedAt"):
            if key in data and not isinstance(data[key], (str, datetime)):
                data.pop(key)

        for key in ("updated_by", "updatedBy"):
            if key in data and not isinstance(data[key], str):
                data.pop(key)

        try:
            return cls.model_validate(data)
        except ValueError:
            # Keep only the fields sanitized above; metadata is optional
            kept = {key: data[key] for key in _SANITIZED_KEYS if key in data}
            return cls.model_validate(kept)

    @property
    def display_name(self) -> str:
        return self.role_name or self.name or self.id or "Unknown"

    def descriptors(self) -> Dict[str, PermissionDescriptor]:
        """
        Source entries for normalization: modulePermissions when present
        and non-empty, otherwise the legacy modules list as view grants.
        """
        if self.module_permissions:
            return {
                key: PermissionDescriptor.parse(value)
                for key, value in self.module_permissions.items()
            }
        if self.modules:
            return {
                module: PermissionDescriptor(kind=DescriptorKind.view, view=True)
                for module in self.modules
            }
        return {}


# ===============================================================
# API MODELS
# ===============================================================

class ModuleGrant(BaseModel):
    view: bool = False


class RoleUpsert(BaseModel):
    """
    Body for creating/updating a role record.
    module_permissions may use any stored shape; it is normalized before save.
    """
    model_config = ConfigDict(populate_by_name=True)

    role_name: str = Field(..., min_length=1, validation_alias=AliasChoices("role_name", "roleName"))
    description: Optional[str] = ""
    module_permissions: Dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("module_permissions", "modulePermissions")
    )
    modules: Optional[List[str]] = None


class RoleRead(BaseModel):
    id: str
    role_name: str
    description: Optional[str] = ""
    module_permissions: Dict[str, ModuleGrant]
    granted_modules: List[str]
