"""Permission catalog service."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_core.exceptions import (
    CannotModifySystemPermissionError,
    PermissionAlreadyExistsError,
    PermissionNotFoundError,
    ValidationError,
)
from rbac_core.models.domain.enums import Resource
from rbac_core.models.domain.permission import Permission
from rbac_core.models.dto.rbac import (
    PermissionCreateRequest,
    PermissionFilter,
    PermissionUpdateRequest,
)
from rbac_core.models.orm.permission import PermissionORM
from rbac_core.repositories.permission_repository import PermissionRepository
from rbac_core.services.audit_service import AuditAction, AuditService, ResourceType

logger = logging.getLogger(__name__)


class PermissionService:
    """Service for permission catalog operations."""

    def __init__(
        self,
        session: AsyncSession,
        permission_repo: PermissionRepository | None = None,
        audit: AuditService | None = None,
    ) -> None:
        """Initialize service with database session."""
        self.session = session
        self.permission_repo = permission_repo or PermissionRepository(session)
        self.audit = audit

    async def _get_or_raise(self, permission_id: UUID) -> PermissionORM:
        permission = await self.permission_repo.get_by_id(permission_id)
        if permission is None:
            raise PermissionNotFoundError(permission_id)
        return permission

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_permission(self, permission_id: UUID) -> Permission:
        """Get a permission by ID.

        Raises:
            PermissionNotFoundError: If the permission does not exist
        """
        return Permission.model_validate(await self._get_or_raise(permission_id))

    async def get_permission_by_code(self, code: str) -> Permission | None:
        """Get a permission by its catalog code."""
        permission = await self.permission_repo.get_by_code(code)
        return Permission.model_validate(permission) if permission else None

    async def list_permissions(self, filters: PermissionFilter | None = None) -> list[Permission]:
        """List catalog entries, optionally filtered."""
        permissions = await self.permission_repo.find_all(filters)
        return [Permission.model_validate(p) for p in permissions]

    async def list_by_resource(self, resource: Resource) -> list[Permission]:
        """List the active permissions of one resource, ordered by action."""
        permissions = await self.permission_repo.list_active_by_resource(resource)
        return [Permission.model_validate(p) for p in permissions]

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_permission(
        self,
        request: PermissionCreateRequest,
        created_by: UUID | None = None,
    ) -> Permission:
        """Create a catalog entry.

        Args:
            request: Permission creation request
            created_by: ID of the user creating the permission

        Returns:
            Created permission

        Raises:
            ValidationError: If the code is blank
            PermissionAlreadyExistsError: If the code already exists
        """
        code = request.code.strip()
        if not code:
            raise ValidationError("Permission code must not be empty")

        if await self.permission_repo.get_by_code(code):
            raise PermissionAlreadyExistsError(code)

        permission = await self.permission_repo.create(
            code=code,
            name=request.name,
            description=request.description,
            resource=request.resource.value,
            action=request.action.value,
            scope=request.scope.value,
            is_system=request.is_system,
            is_active=True,
        )
        await self.session.commit()

        logger.info(f"Permission created: {code}")
        if self.audit:
            self.audit.admin_change(
                AuditAction.PERMISSION_CREATE,
                ResourceType.PERMISSION,
                resource_id=permission.id,
                actor_id=created_by,
                details={"code": code},
            )
        return Permission.model_validate(permission)

    async def create_many(self, requests: list[PermissionCreateRequest]) -> int:
        """Create every permission whose code is not in the catalog yet.

        Args:
            requests: Permission definitions

        Returns:
            Number of permissions created
        """
        existing_codes = await self.permission_repo.get_existing_codes()
        created = 0
        for request in requests:
            if request.code in existing_codes:
                continue
            await self.permission_repo.create(
                code=request.code,
                name=request.name,
                description=request.description,
                resource=request.resource.value,
                action=request.action.value,
                scope=request.scope.value,
                is_system=request.is_system,
                is_active=True,
            )
            existing_codes.add(request.code)
            created += 1

        await self.session.commit()
        return created

    async def update_permission(
        self,
        permission_id: UUID,
        request: PermissionUpdateRequest,
        updated_by: UUID | None = None,
    ) -> Permission:
        """Update a catalog entry.

        Args:
            permission_id: Permission to update
            request: Fields to change
            updated_by: ID of the user making the change

        Returns:
            Updated permission

        Raises:
            PermissionNotFoundError: If the permission does not exist
            CannotModifySystemPermissionError: If deactivating a system permission
        """
        permission = await self._get_or_raise(permission_id)
        changes = request.model_dump(exclude_unset=True)

        if changes.get("is_active") is False and permission.is_system:
            raise CannotModifySystemPermissionError(permission.code)
        if "scope" in changes and changes["scope"] is not None:
            changes["scope"] = changes["scope"].value
        for field in ("name", "scope", "is_active"):
            # Non-nullable columns ignore explicit None
            if field in changes and changes[field] is None:
                del changes[field]

        permission = await self.permission_repo.update(permission, **changes)
        await self.session.commit()

        logger.info(f"Permission updated: {permission.code}")
        if self.audit:
            self.audit.admin_change(
                AuditAction.PERMISSION_UPDATE,
                ResourceType.PERMISSION,
                resource_id=permission.id,
                actor_id=updated_by,
                details={"code": permission.code, "fields": sorted(changes)},
            )
        return Permission.model_validate(permission)

    async def deactivate_permission(
        self, permission_id: UUID, updated_by: UUID | None = None
    ) -> Permission:
        """Deactivate a catalog entry.

        Raises:
            PermissionNotFoundError: If the permission does not exist
            CannotModifySystemPermissionError: If it is a system permission
        """
        return await self.update_permission(
            permission_id, PermissionUpdateRequest(is_active=False), updated_by
        )

    async def delete_permission(self, permission_id: UUID, deleted_by: UUID | None = None) -> None:
        """Delete a catalog entry and, through the store, its grants.

        Raises:
            PermissionNotFoundError: If the permission does not exist
            CannotModifySystemPermissionError: If it is a system permission
        """
        permission = await self._get_or_raise(permission_id)
        if permission.is_system:
            raise CannotModifySystemPermissionError(permission.code)

        code = permission.code
        await self.permission_repo.delete(permission)
        await self.session.commit()

        logger.info(f"Permission deleted: {code}")
        if self.audit:
            self.audit.admin_change(
                AuditAction.PERMISSION_DELETE,
                ResourceType.PERMISSION,
                resource_id=permission_id,
                actor_id=deleted_by,
                details={"code": code},
            )
