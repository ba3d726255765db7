from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# BUILT-IN ROLES
# -----------------------------------------------------
class RoleName(BaseStrEnum):
    """Roles shipped with the static permission catalog."""

    super_admin = "Super Admin"
    admin = "Admin"
    officer = "Officer"
    encoder = "Encoder"
    viewer = "Viewer"


# -----------------------------------------------------
# MODULE ACTIONS
# -----------------------------------------------------
class ModuleAction(BaseStrEnum):
    """Actions a token can grant on a module."""

    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"
    approve = "approve"
    reject = "reject"
    export = "export"
    archive = "archive"


# -----------------------------------------------------
# STORED DESCRIPTOR SHAPES
# -----------------------------------------------------
class DescriptorKind(BaseStrEnum):
    """Shape of one stored modulePermissions value."""

    flag = "flag"          # legacy bare boolean
    view = "view"          # {"view": bool, ...}
    actions = "actions"    # {"edit": bool, "delete": bool, ...} without view
    empty = "empty"        # {} or anything unusable


# -----------------------------------------------------
# CAPABILITY GATE STATES
# -----------------------------------------------------
class GateState(BaseStrEnum):
    """Outcome of a route-level capability check."""

    loading = "LOADING"
    unauthenticated = "UNAUTHENTICATED"
    denied = "AUTHENTICATED_DENIED"
    allowed = "AUTHENTICATED_ALLOWED"
