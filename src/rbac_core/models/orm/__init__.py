"""SQLAlchemy ORM models package."""

from rbac_core.models.orm.base import Base
from rbac_core.models.orm.department import DepartmentORM
from rbac_core.models.orm.permission import PermissionORM
from rbac_core.models.orm.role import RoleORM
from rbac_core.models.orm.role_permission import RolePermissionORM
from rbac_core.models.orm.user_role import UserRoleORM

__all__ = [
    "Base",
    "DepartmentORM",
    "PermissionORM",
    "RoleORM",
    "RolePermissionORM",
    "UserRoleORM",
]
