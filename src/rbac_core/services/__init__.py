"""Services package."""

from rbac_core.services.audit_service import AuditService
from rbac_core.services.authorization_service import AuthorizationService
from rbac_core.services.permission_service import PermissionService
from rbac_core.services.role_service import RoleService
from rbac_core.services.seed_service import SeedService

__all__ = [
    "AuditService",
    "AuthorizationService",
    "PermissionService",
    "RoleService",
    "SeedService",
]
