"""Repositories package."""

from rbac_core.repositories.base import BaseRepository
from rbac_core.repositories.department_repository import DepartmentRepository
from rbac_core.repositories.permission_repository import PermissionRepository
from rbac_core.repositories.role_repository import RoleRepository
from rbac_core.repositories.user_role_repository import UserRoleRepository

__all__ = [
    "BaseRepository",
    "DepartmentRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRoleRepository",
]
