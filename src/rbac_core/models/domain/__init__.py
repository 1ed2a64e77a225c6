"""Domain models package."""

from rbac_core.models.domain.assignment import Assignment, AssignmentWithRole
from rbac_core.models.domain.enums import Action, Resource, Scope
from rbac_core.models.domain.permission import Permission
from rbac_core.models.domain.role import Role, RoleWithPermissions

__all__ = [
    "Action",
    "Assignment",
    "AssignmentWithRole",
    "Permission",
    "Resource",
    "Role",
    "RoleWithPermissions",
    "Scope",
]
