"""Centralized dependency injection factories for FastAPI.

Services are built per request on the request's database session. The
audit notifier is process-wide so its background deliveries outlive the
request that scheduled them.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_core.database import get_db
from rbac_core.services.audit_service import AuditService
from rbac_core.services.authorization_service import AuthorizationService
from rbac_core.services.permission_service import PermissionService
from rbac_core.services.role_service import RoleService


# =============================================================================
# Core Service Factories
# =============================================================================


@lru_cache(maxsize=1)
def get_audit_service() -> AuditService:
    """Get the shared AuditService instance."""
    return AuditService()


def get_authorization_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
) -> AuthorizationService:
    """Get AuthorizationService instance."""
    return AuthorizationService(db, audit=audit)


def get_role_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
) -> RoleService:
    """Get RoleService instance."""
    return RoleService(db, audit=audit)


def get_permission_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
) -> PermissionService:
    """Get PermissionService instance."""
    return PermissionService(db, audit=audit)
