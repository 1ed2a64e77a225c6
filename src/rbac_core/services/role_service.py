"""Role registry service: roles and their permission grants."""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_core.exceptions import (
    CannotModifySystemRoleError,
    InvalidParentRoleError,
    ParentRoleNotFoundError,
    PermissionNotFoundError,
    RoleAlreadyExistsError,
    RoleNotFoundError,
)
from rbac_core.models.domain.permission import Permission
from rbac_core.models.domain.role import Role, RoleWithPermissions
from rbac_core.models.dto.rbac import RoleCreateRequest, RoleFilter, RoleUpdateRequest
from rbac_core.models.orm.role import RoleORM
from rbac_core.repositories.permission_repository import PermissionRepository
from rbac_core.repositories.role_repository import RoleRepository
from rbac_core.services.audit_service import AuditAction, AuditService, ResourceType

logger = logging.getLogger(__name__)


class RoleService:
    """Service for role registry operations."""

    def __init__(
        self,
        session: AsyncSession,
        role_repo: RoleRepository | None = None,
        permission_repo: PermissionRepository | None = None,
        audit: AuditService | None = None,
    ) -> None:
        """Initialize service with database session."""
        self.session = session
        self.role_repo = role_repo or RoleRepository(session)
        self.permission_repo = permission_repo or PermissionRepository(session)
        self.audit = audit

    async def _get_or_raise(self, role_id: UUID) -> RoleORM:
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    async def _with_permissions(self, role: RoleORM) -> RoleWithPermissions:
        permissions = await self.role_repo.get_permissions(role.id)
        return RoleWithPermissions(
            **Role.model_validate(role).model_dump(),
            permissions=[Permission.model_validate(p) for p in permissions],
        )

    def _audit(self, action: str, role_id: UUID, actor_id: UUID | None, **details) -> None:
        if self.audit:
            self.audit.admin_change(
                action, ResourceType.ROLE, resource_id=role_id, actor_id=actor_id, details=details
            )

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_role(self, role_id: UUID) -> RoleWithPermissions:
        """Get a role with its active permissions.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        return await self._with_permissions(await self._get_or_raise(role_id))

    async def get_role_by_code(self, code: str) -> RoleWithPermissions | None:
        """Get a role with its active permissions by code."""
        role = await self.role_repo.get_by_code(code)
        return await self._with_permissions(role) if role else None

    async def list_roles(self, filters: RoleFilter | None = None) -> list[Role]:
        """List roles, highest level first."""
        roles = await self.role_repo.find_all(filters)
        return [Role.model_validate(r) for r in roles]

    async def get_permissions(self, role_id: UUID, active_only: bool = True) -> list[Permission]:
        """Get the permissions granted to a role.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        await self._get_or_raise(role_id)
        permissions = await self.role_repo.get_permissions(role_id, active_only=active_only)
        return [Permission.model_validate(p) for p in permissions]

    # =========================================================================
    # Role CRUD
    # =========================================================================

    async def create_role(self, request: RoleCreateRequest, created_by: UUID | None = None) -> Role:
        """Create a role.

        Args:
            request: Role creation request
            created_by: ID of the user creating the role

        Returns:
            Created role

        Raises:
            RoleAlreadyExistsError: If role code already exists
            ParentRoleNotFoundError: If the parent role does not exist
        """
        if await self.role_repo.get_by_code(request.code):
            raise RoleAlreadyExistsError(request.code)

        if request.parent_role_id is not None and not await self.role_repo.exists(
            request.parent_role_id
        ):
            raise ParentRoleNotFoundError(request.parent_role_id)

        role = await self.role_repo.create(
            code=request.code,
            name=request.name,
            description=request.description,
            level=request.level,
            parent_role_id=request.parent_role_id,
            is_system=request.is_system,
            is_active=True,
        )
        await self.session.commit()

        logger.info(f"Role created: {role.code}")
        self._audit(AuditAction.ROLE_CREATE, role.id, created_by, code=role.code)
        return Role.model_validate(role)

    async def update_role(
        self,
        role_id: UUID,
        request: RoleUpdateRequest,
        updated_by: UUID | None = None,
    ) -> Role:
        """Update a role.

        Only fields set on the request are applied; an explicit
        ``parent_role_id=None`` clears the parent.

        Args:
            role_id: Role ID to update
            request: Update request
            updated_by: ID of the user making the update

        Returns:
            Updated role

        Raises:
            RoleNotFoundError: If role not found
            CannotModifySystemRoleError: If deactivating a system role
            InvalidParentRoleError: If the role would be its own parent or
                the parent does not exist
        """
        role = await self._get_or_raise(role_id)
        changes = request.model_dump(exclude_unset=True)

        if changes.get("is_active") is False and role.is_system:
            raise CannotModifySystemRoleError(role.code)

        parent_role_id = changes.get("parent_role_id")
        if parent_role_id is not None:
            if parent_role_id == role_id or not await self.role_repo.exists(parent_role_id):
                raise InvalidParentRoleError(role_id, parent_role_id)

        for field in ("name", "level", "is_active"):
            # Non-nullable columns ignore explicit None
            if field in changes and changes[field] is None:
                del changes[field]

        role = await self.role_repo.update(role, **changes)
        await self.session.commit()

        logger.info(f"Role updated: {role.code}")
        self._audit(AuditAction.ROLE_UPDATE, role.id, updated_by, fields=sorted(changes))
        return Role.model_validate(role)

    async def deactivate_role(self, role_id: UUID, updated_by: UUID | None = None) -> Role:
        """Deactivate a role. Its assignments stop being effective.

        Raises:
            RoleNotFoundError: If role not found
            CannotModifySystemRoleError: If role is a system role
        """
        return await self.update_role(role_id, RoleUpdateRequest(is_active=False), updated_by)

    async def delete_role(self, role_id: UUID, deleted_by: UUID | None = None) -> None:
        """Delete a role together with its grants and assignments.

        Args:
            role_id: Role ID to delete
            deleted_by: ID of the user deleting the role

        Raises:
            RoleNotFoundError: If role not found
            CannotModifySystemRoleError: If role is a system role
        """
        role = await self._get_or_raise(role_id)
        if role.is_system:
            raise CannotModifySystemRoleError(role.code)

        code = role.code
        await self.role_repo.delete(role)
        await self.session.commit()

        logger.info(f"Role deleted: {code}")
        self._audit(AuditAction.ROLE_DELETE, role_id, deleted_by, code=code)

    # =========================================================================
    # Grants
    # =========================================================================

    async def grant_permission(
        self,
        role_id: UUID,
        permission_id: UUID,
        granted_by: UUID | None = None,
    ) -> None:
        """Grant a permission to a role. Granting twice is a no-op.

        Raises:
            RoleNotFoundError: If the role does not exist
            PermissionNotFoundError: If the permission does not exist
        """
        await self._get_or_raise(role_id)
        if not await self.permission_repo.exists(permission_id):
            raise PermissionNotFoundError(permission_id)

        await self.role_repo.add_permission(role_id, permission_id, granted_by)
        await self.session.commit()

        self._audit(
            AuditAction.ROLE_PERMISSION_GRANT,
            role_id,
            granted_by,
            permission_id=str(permission_id),
        )

    async def revoke_permission(
        self,
        role_id: UUID,
        permission_id: UUID,
        revoked_by: UUID | None = None,
    ) -> None:
        """Remove a permission from a role. Revoking an absent grant is a no-op.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        await self._get_or_raise(role_id)
        removed = await self.role_repo.remove_permission(role_id, permission_id)
        await self.session.commit()

        if removed:
            self._audit(
                AuditAction.ROLE_PERMISSION_REVOKE,
                role_id,
                revoked_by,
                permission_id=str(permission_id),
            )

    async def set_permissions(
        self,
        role_id: UUID,
        permission_ids: list[UUID],
        granted_by: UUID | None = None,
    ) -> RoleWithPermissions:
        """Replace the complete grant set of a role in one transaction.

        Every permission is checked before anything is written, and the
        delete and inserts commit together, so readers see either the old
        set or the new one.

        Args:
            role_id: Role UUID
            permission_ids: New grant set; duplicates collapse
            granted_by: ID of the granting user

        Returns:
            Role with its new active permissions

        Raises:
            RoleNotFoundError: If the role does not exist
            PermissionNotFoundError: If any permission does not exist
        """
        role = await self._get_or_raise(role_id)

        unique_ids = list(dict.fromkeys(permission_ids))
        found = {p.id for p in await self.permission_repo.get_by_ids(unique_ids)}
        missing = [pid for pid in unique_ids if pid not in found]
        if missing:
            raise PermissionNotFoundError(missing[0])

        try:
            await self.role_repo.set_permissions(role_id, unique_ids, granted_by)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        logger.info(f"Role permissions replaced: {role.code} ({len(unique_ids)} permissions)")
        self._audit(
            AuditAction.ROLE_PERMISSIONS_SET,
            role_id,
            granted_by,
            permission_count=len(unique_ids),
        )
        return await self._with_permissions(role)
