"""User role assignment repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, Select, and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import contains_eager, selectinload

from rbac_core.models.orm.base import as_utc, utcnow
from rbac_core.models.orm.permission import PermissionORM
from rbac_core.models.orm.role import RoleORM
from rbac_core.models.orm.role_permission import RolePermissionORM
from rbac_core.models.orm.user_role import UserRoleORM
from rbac_core.repositories.base import BaseRepository


def _department_key(department_id: UUID | None) -> ColumnElement[bool]:
    """Match one assignment key, treating a NULL department as the global key."""
    if department_id is None:
        return UserRoleORM.department_id.is_(None)
    return UserRoleORM.department_id == department_id


def _department_context(department_id: UUID | None) -> ColumnElement[bool]:
    """Assignments in force for a department: global ones plus that department's."""
    if department_id is None:
        return UserRoleORM.department_id.is_(None)
    return or_(
        UserRoleORM.department_id.is_(None),
        UserRoleORM.department_id == department_id,
    )


def _currently_effective(now: datetime) -> ColumnElement[bool]:
    """Active, unexpired assignment of an active role."""
    return and_(
        UserRoleORM.is_active.is_(True),
        or_(UserRoleORM.expires_at.is_(None), UserRoleORM.expires_at > now),
        RoleORM.is_active.is_(True),
    )


class UserRoleRepository(BaseRepository[UserRoleORM]):
    """Repository for user role assignments.

    Read methods that take ``any_department=True`` ignore the department
    context and return everything in force for the user.
    """

    model = UserRoleORM

    def _scoped(
        self,
        query: Select,
        department_id: UUID | None,
        any_department: bool,
    ) -> Select:
        if any_department:
            return query
        return query.where(_department_context(department_id))

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_effective_assignments(
        self,
        user_id: UUID,
        department_id: UUID | None = None,
        any_department: bool = False,
    ) -> list[UserRoleORM]:
        """Get assignments currently in force.

        Global assignments always apply. With a department, assignments
        scoped to that department apply as well; assignments scoped to any
        other department never do.

        Args:
            user_id: User UUID
            department_id: Target department, or None for global only
            any_department: Ignore the department context entirely

        Returns:
            List of UserRoleORM with the role loaded, highest level first
        """
        query = (
            select(UserRoleORM)
            .join(RoleORM, RoleORM.id == UserRoleORM.role_id)
            .where(UserRoleORM.user_id == user_id)
            .where(_currently_effective(utcnow()))
            .options(selectinload(UserRoleORM.role))
            .order_by(RoleORM.level.desc(), RoleORM.code)
        )
        query = self._scoped(query, department_id, any_department)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_effective_permissions(
        self,
        user_id: UUID,
        department_id: UUID | None = None,
        any_department: bool = False,
    ) -> list[PermissionORM]:
        """Get the distinct active permissions granted by assignments in force.

        A permission reachable through several roles or assignments is
        returned once.

        Args:
            user_id: User UUID
            department_id: Target department, or None for global only
            any_department: Ignore the department context entirely

        Returns:
            List of PermissionORM ordered by code
        """
        query = (
            select(PermissionORM)
            .join(RolePermissionORM, RolePermissionORM.permission_id == PermissionORM.id)
            .join(RoleORM, RoleORM.id == RolePermissionORM.role_id)
            .join(UserRoleORM, UserRoleORM.role_id == RoleORM.id)
            .where(UserRoleORM.user_id == user_id)
            .where(_currently_effective(utcnow()))
            .where(PermissionORM.is_active.is_(True))
            .distinct()
            .order_by(PermissionORM.code)
        )
        query = self._scoped(query, department_id, any_department)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_effective_grants(
        self,
        user_id: UUID,
    ) -> list[tuple[UserRoleORM, PermissionORM | None]]:
        """Get every assignment in force paired with each active permission it grants.

        Assignments and permissions come from one statement, so both halves
        reflect the same state of the store. An assignment whose role grants
        no active permission appears once, paired with None.

        Args:
            user_id: User UUID

        Returns:
            List of (assignment, permission) pairs, highest role level first
        """
        query = (
            select(UserRoleORM, PermissionORM)
            .join(RoleORM, RoleORM.id == UserRoleORM.role_id)
            .outerjoin(RolePermissionORM, RolePermissionORM.role_id == RoleORM.id)
            .outerjoin(
                PermissionORM,
                and_(
                    PermissionORM.id == RolePermissionORM.permission_id,
                    PermissionORM.is_active.is_(True),
                ),
            )
            .where(UserRoleORM.user_id == user_id)
            .where(_currently_effective(utcnow()))
            .options(contains_eager(UserRoleORM.role))
            .order_by(RoleORM.level.desc(), RoleORM.code, PermissionORM.code)
        )
        result = await self.session.execute(query)
        return [(assignment, permission) for assignment, permission in result.all()]

    async def get_effective_assignments_for_role(
        self,
        role_id: UUID,
        department_id: UUID | None = None,
    ) -> list[UserRoleORM]:
        """Get assignments of a role currently in force.

        Args:
            role_id: Role UUID
            department_id: Restrict to one department's assignments

        Returns:
            List of UserRoleORM
        """
        query = (
            select(UserRoleORM)
            .join(RoleORM, RoleORM.id == UserRoleORM.role_id)
            .where(UserRoleORM.role_id == role_id)
            .where(_currently_effective(utcnow()))
            .order_by(UserRoleORM.assigned_at)
        )
        if department_id is not None:
            query = query.where(UserRoleORM.department_id == department_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def has_role(
        self,
        user_id: UUID,
        role_code: str,
        department_id: UUID | None = None,
    ) -> bool:
        """Check for an effective assignment of a role by code.

        Args:
            user_id: User UUID
            role_code: Role code
            department_id: Target department; global assignments always count

        Returns:
            True if such an assignment is in force
        """
        query = (
            select(UserRoleORM.id)
            .join(RoleORM, RoleORM.id == UserRoleORM.role_id)
            .where(UserRoleORM.user_id == user_id)
            .where(RoleORM.code == role_code)
            .where(_currently_effective(utcnow()))
            .where(_department_context(department_id))
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def has_permission_code(
        self,
        user_id: UUID,
        code: str,
        department_id: UUID | None = None,
    ) -> bool:
        """Check whether an assignment in force grants a permission by catalog code."""
        query = (
            select(PermissionORM.id)
            .join(RolePermissionORM, RolePermissionORM.permission_id == PermissionORM.id)
            .join(RoleORM, RoleORM.id == RolePermissionORM.role_id)
            .join(UserRoleORM, UserRoleORM.role_id == RoleORM.id)
            .where(UserRoleORM.user_id == user_id)
            .where(PermissionORM.code == code)
            .where(PermissionORM.is_active.is_(True))
            .where(_currently_effective(utcnow()))
            .where(_department_context(department_id))
            .limit(1)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def find(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
        for_update: bool = False,
    ) -> UserRoleORM | None:
        """Find the assignment row for a (user, role, department) key.

        Args:
            user_id: User UUID
            role_id: Role UUID
            department_id: Department UUID, or None for the global row
            for_update: Lock the row until the transaction ends

        Returns:
            UserRoleORM or None if not found
        """
        query = (
            select(UserRoleORM)
            .where(UserRoleORM.user_id == user_id)
            .where(UserRoleORM.role_id == role_id)
            .where(_department_key(department_id))
            .order_by(UserRoleORM.assigned_at.desc())
            .limit(1)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_for_key(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
    ) -> list[UserRoleORM]:
        """Get every row stored for a (user, role, department) key."""
        result = await self.session.execute(
            select(UserRoleORM)
            .where(UserRoleORM.user_id == user_id)
            .where(UserRoleORM.role_id == role_id)
            .where(_department_key(department_id))
        )
        return list(result.scalars().all())

    # =========================================================================
    # Writes
    # =========================================================================

    def _reactivate(
        self,
        assignment: UserRoleORM,
        expires_at: datetime | None,
        assigned_by: UUID | None,
    ) -> None:
        assignment.is_active = True
        assignment.expires_at = as_utc(expires_at)
        assignment.assigned_by = assigned_by
        assignment.assigned_at = utcnow()

    async def assign(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
        expires_at: datetime | None = None,
        assigned_by: UUID | None = None,
    ) -> UserRoleORM:
        """Assign a role, reactivating an existing row for the same key.

        The existing row is locked while it is updated. A new row is
        inserted inside a savepoint; if a concurrent writer inserted the
        same key first, the unique constraint fires and that row is
        reactivated instead.

        Args:
            user_id: User UUID
            role_id: Role UUID
            department_id: Department UUID, or None for a global assignment
            expires_at: When the assignment stops being effective
            assigned_by: ID of the assigning user

        Returns:
            The active assignment row
        """
        expires_at = as_utc(expires_at)
        existing = await self.find(user_id, role_id, department_id, for_update=True)
        if existing is not None:
            self._reactivate(existing, expires_at, assigned_by)
            await self.session.flush()
            return existing

        assignment = UserRoleORM(
            user_id=user_id,
            role_id=role_id,
            department_id=department_id,
            expires_at=expires_at,
            assigned_by=assigned_by,
            assigned_at=utcnow(),
            is_active=True,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(assignment)
        except IntegrityError:
            existing = await self.find(user_id, role_id, department_id, for_update=True)
            if existing is None:
                raise
            self._reactivate(existing, expires_at, assigned_by)
            await self.session.flush()
            return existing
        return assignment

    async def revoke(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
    ) -> int:
        """Deactivate every row for a (user, role, department) key.

        Args:
            user_id: User UUID
            role_id: Role UUID
            department_id: Department UUID, or None for the global row

        Returns:
            Number of rows deactivated (zero is not an error)
        """
        revoked = [a for a in await self.get_for_key(user_id, role_id, department_id) if a.is_active]
        for assignment in revoked:
            assignment.is_active = False
        await self.session.flush()
        return len(revoked)
