"""Role repository."""

from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError

from rbac_core.models.dto.rbac import RoleFilter
from rbac_core.models.orm.permission import PermissionORM
from rbac_core.models.orm.role import RoleORM
from rbac_core.models.orm.role_permission import RolePermissionORM
from rbac_core.models.orm.user_role import UserRoleORM
from rbac_core.repositories.base import BaseRepository
from rbac_core.utils.validation import contains_pattern


class RoleRepository(BaseRepository[RoleORM]):
    """Repository for role and grant operations."""

    model = RoleORM

    async def get_by_code(self, code: str) -> RoleORM | None:
        """Get role by code.

        Args:
            code: Role code

        Returns:
            RoleORM or None if not found
        """
        result = await self.session.execute(select(RoleORM).where(RoleORM.code == code))
        return result.scalar_one_or_none()

    async def get_by_codes(self, codes: list[str]) -> list[RoleORM]:
        """Get roles by codes.

        Args:
            codes: List of role codes

        Returns:
            List of RoleORM
        """
        if not codes:
            return []
        result = await self.session.execute(select(RoleORM).where(RoleORM.code.in_(codes)))
        return list(result.scalars().all())

    async def find_all(self, filters: RoleFilter | None = None) -> list[RoleORM]:
        """List roles matching the given filters.

        Args:
            filters: Optional active/system/level filters and a
                case-insensitive search over code, name and description

        Returns:
            List of RoleORM ordered by level (highest first) then name
        """
        query = select(RoleORM)
        if filters is not None:
            if filters.is_active is not None:
                query = query.where(RoleORM.is_active.is_(filters.is_active))
            if filters.is_system is not None:
                query = query.where(RoleORM.is_system.is_(filters.is_system))
            if filters.min_level is not None:
                query = query.where(RoleORM.level >= filters.min_level)
            if filters.max_level is not None:
                query = query.where(RoleORM.level <= filters.max_level)
            pattern = contains_pattern(filters.search)
            if pattern:
                query = query.where(
                    or_(
                        RoleORM.code.ilike(pattern, escape="\\"),
                        RoleORM.name.ilike(pattern, escape="\\"),
                        RoleORM.description.ilike(pattern, escape="\\"),
                    )
                )

        result = await self.session.execute(query.order_by(RoleORM.level.desc(), RoleORM.name))
        return list(result.scalars().all())

    # =========================================================================
    # Grants
    # =========================================================================

    async def get_grant(self, role_id: UUID, permission_id: UUID) -> RolePermissionORM | None:
        """Get the grant row for a role/permission pair."""
        result = await self.session.execute(
            select(RolePermissionORM)
            .where(RolePermissionORM.role_id == role_id)
            .where(RolePermissionORM.permission_id == permission_id)
        )
        return result.scalar_one_or_none()

    async def get_permissions(self, role_id: UUID, active_only: bool = True) -> list[PermissionORM]:
        """Get the permissions granted to a role.

        Args:
            role_id: Role UUID
            active_only: Skip deactivated permissions

        Returns:
            List of PermissionORM ordered by code
        """
        query = (
            select(PermissionORM)
            .join(RolePermissionORM, RolePermissionORM.permission_id == PermissionORM.id)
            .where(RolePermissionORM.role_id == role_id)
        )
        if active_only:
            query = query.where(PermissionORM.is_active.is_(True))
        result = await self.session.execute(query.order_by(PermissionORM.code))
        return list(result.scalars().all())

    async def count_grants(self, role_id: UUID) -> int:
        """Count grant rows for a role."""
        result = await self.session.execute(
            select(func.count()).select_from(RolePermissionORM).where(
                RolePermissionORM.role_id == role_id
            )
        )
        return result.scalar_one()

    async def add_permission(
        self,
        role_id: UUID,
        permission_id: UUID,
        granted_by: UUID | None = None,
    ) -> RolePermissionORM:
        """Grant a permission to a role, keeping an existing grant as-is.

        The grant is inserted inside a savepoint; if a concurrent writer
        granted the same pair first, the unique constraint fires and that
        grant is returned instead.

        Args:
            role_id: Role UUID
            permission_id: Permission UUID
            granted_by: ID of the granting user

        Returns:
            The new or already existing grant
        """
        existing = await self.get_grant(role_id, permission_id)
        if existing is not None:
            return existing

        grant = RolePermissionORM(
            role_id=role_id, permission_id=permission_id, granted_by=granted_by
        )
        try:
            async with self.session.begin_nested():
                self.session.add(grant)
        except IntegrityError:
            existing = await self.get_grant(role_id, permission_id)
            if existing is None:
                raise
            return existing
        return grant

    async def remove_permission(self, role_id: UUID, permission_id: UUID) -> int:
        """Remove a permission from a role.

        Args:
            role_id: Role UUID
            permission_id: Permission UUID

        Returns:
            Number of grant rows removed (0 or 1)
        """
        result = await self.session.execute(
            delete(RolePermissionORM)
            .where(RolePermissionORM.role_id == role_id)
            .where(RolePermissionORM.permission_id == permission_id)
        )
        await self.session.flush()
        return result.rowcount or 0

    async def set_permissions(
        self,
        role_id: UUID,
        permission_ids: list[UUID],
        granted_by: UUID | None = None,
    ) -> None:
        """Set permissions for a role (replaces existing).

        Must run inside the caller's transaction so the delete and the
        inserts commit together.

        Args:
            role_id: Role UUID
            permission_ids: Distinct permission UUIDs
            granted_by: ID of the granting user
        """
        await self.session.execute(
            delete(RolePermissionORM).where(RolePermissionORM.role_id == role_id)
        )

        for permission_id in permission_ids:
            self.session.add(
                RolePermissionORM(
                    role_id=role_id, permission_id=permission_id, granted_by=granted_by
                )
            )

        await self.session.flush()

    async def count_assignments(self, role_id: UUID, active_only: bool = True) -> int:
        """Count user assignments of a role.

        Args:
            role_id: Role UUID
            active_only: Count only active assignments

        Returns:
            Number of assignments
        """
        query = select(func.count()).select_from(UserRoleORM).where(UserRoleORM.role_id == role_id)
        if active_only:
            query = query.where(UserRoleORM.is_active.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one()
