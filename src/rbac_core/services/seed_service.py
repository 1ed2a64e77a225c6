"""Seeding of the default permission catalog, system roles and grants.

Safe to run repeatedly: existing permissions, roles and grants are left
untouched and only missing entries are added.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rbac_core.constants.rbac_defaults import DEFAULT_PERMISSIONS, DEFAULT_ROLES, ROLE_PERMISSIONS
from rbac_core.models.dto.rbac import PermissionCreateRequest
from rbac_core.models.orm.role_permission import RolePermissionORM
from rbac_core.repositories.permission_repository import PermissionRepository
from rbac_core.repositories.role_repository import RoleRepository
from rbac_core.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class SeedService:
    """Creates the default catalog and keeps system role grants complete."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the service.

        Args:
            session: Database session
        """
        self.session = session
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.permission_service = PermissionService(session, permission_repo=self.permission_repo)

    async def seed(self) -> dict[str, int]:
        """Seed permissions, roles and the default grants.

        Returns:
            Counts of permissions, roles and grants created
        """
        results = {
            "permissions_created": await self._seed_permissions(),
            "roles_created": await self._seed_roles(),
            "grants_created": await self._seed_grants(),
        }
        await self.session.commit()

        if any(results.values()):
            logger.info(
                f"RBAC seed completed: {results['permissions_created']} permissions, "
                f"{results['roles_created']} roles, {results['grants_created']} grants created"
            )
        else:
            logger.debug("RBAC seed: no changes needed")

        return results

    async def _seed_permissions(self) -> int:
        requests = [
            PermissionCreateRequest(
                code=code,
                name=name,
                resource=resource,
                action=action,
                scope=scope,
                is_system=True,
            )
            for code, name, resource, action, scope in DEFAULT_PERMISSIONS
        ]
        return await self.permission_service.create_many(requests)

    async def _seed_roles(self) -> int:
        existing = {r.code for r in await self.role_repo.get_by_codes([r[0] for r in DEFAULT_ROLES])}
        created = 0
        for code, name, description, level in DEFAULT_ROLES:
            if code in existing:
                continue
            await self.role_repo.create(
                code=code,
                name=name,
                description=description,
                level=level,
                is_system=True,
                is_active=True,
            )
            created += 1
        return created

    async def _seed_grants(self) -> int:
        """Add missing grants from the default mapping.

        Returns:
            Number of grants added
        """
        roles = {r.code: r for r in await self.role_repo.get_by_codes(list(ROLE_PERMISSIONS))}
        all_codes = {code for codes in ROLE_PERMISSIONS.values() for code in codes}
        permissions = {p.code: p for p in await self.permission_repo.get_by_codes(list(all_codes))}

        added = 0
        for role_code, permission_codes in ROLE_PERMISSIONS.items():
            role = roles.get(role_code)
            if role is None:
                continue

            existing_result = await self.session.execute(
                select(RolePermissionORM.permission_id).where(RolePermissionORM.role_id == role.id)
            )
            existing_ids = set(existing_result.scalars().all())

            for code in permission_codes:
                permission = permissions.get(code)
                if permission is None:
                    logger.warning(f"RBAC seed: unknown permission {code} for role {role_code}")
                    continue
                if permission.id in existing_ids:
                    continue
                self.session.add(RolePermissionORM(role_id=role.id, permission_id=permission.id))
                existing_ids.add(permission.id)
                added += 1

        if added > 0:
            await self.session.flush()

        return added


async def seed_default_rbac() -> dict[str, int]:
    """Convenience function to seed the defaults in a fresh session.

    Called from application startup and the seed script.

    Returns:
        Counts of created entries
    """
    from rbac_core.database import get_session_maker

    async with get_session_maker()() as session:
        return await SeedService(session).seed()
