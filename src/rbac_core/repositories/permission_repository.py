"""Permission repository."""

from sqlalchemy import or_, select

from rbac_core.models.dto.rbac import PermissionFilter
from rbac_core.models.domain.enums import Resource
from rbac_core.models.orm.permission import PermissionORM
from rbac_core.repositories.base import BaseRepository
from rbac_core.utils.validation import contains_pattern


class PermissionRepository(BaseRepository[PermissionORM]):
    """Repository for permission catalog operations."""

    model = PermissionORM

    async def get_by_code(self, code: str) -> PermissionORM | None:
        """Get permission by code.

        Args:
            code: Permission code

        Returns:
            PermissionORM or None if not found
        """
        result = await self.session.execute(select(PermissionORM).where(PermissionORM.code == code))
        return result.scalar_one_or_none()

    async def get_by_codes(self, codes: list[str]) -> list[PermissionORM]:
        """Get permissions by codes.

        Args:
            codes: List of permission codes

        Returns:
            List of PermissionORM
        """
        if not codes:
            return []
        result = await self.session.execute(
            select(PermissionORM).where(PermissionORM.code.in_(codes))
        )
        return list(result.scalars().all())

    async def get_existing_codes(self) -> set[str]:
        """Get the codes of every catalog entry."""
        result = await self.session.execute(select(PermissionORM.code))
        return set(result.scalars().all())

    async def find_all(self, filters: PermissionFilter | None = None) -> list[PermissionORM]:
        """List permissions matching the given filters.

        Args:
            filters: Optional resource/action/scope/active filters and a
                case-insensitive search over code, name and description

        Returns:
            List of PermissionORM ordered by resource and action
        """
        query = select(PermissionORM)
        if filters is not None:
            if filters.resource is not None:
                query = query.where(PermissionORM.resource == filters.resource.value)
            if filters.action is not None:
                query = query.where(PermissionORM.action == filters.action.value)
            if filters.scope is not None:
                query = query.where(PermissionORM.scope == filters.scope.value)
            if filters.is_active is not None:
                query = query.where(PermissionORM.is_active.is_(filters.is_active))
            pattern = contains_pattern(filters.search)
            if pattern:
                query = query.where(
                    or_(
                        PermissionORM.code.ilike(pattern, escape="\\"),
                        PermissionORM.name.ilike(pattern, escape="\\"),
                        PermissionORM.description.ilike(pattern, escape="\\"),
                    )
                )

        result = await self.session.execute(
            query.order_by(PermissionORM.resource, PermissionORM.action, PermissionORM.code)
        )
        return list(result.scalars().all())

    async def list_active_by_resource(self, resource: Resource) -> list[PermissionORM]:
        """Get active permissions for one resource.

        Args:
            resource: Resource tag

        Returns:
            List of active PermissionORM ordered by action
        """
        result = await self.session.execute(
            select(PermissionORM)
            .where(PermissionORM.resource == resource.value)
            .where(PermissionORM.is_active.is_(True))
            .order_by(PermissionORM.action, PermissionORM.code)
        )
        return list(result.scalars().all())
