"""Authorization service: role assignments and permission evaluation."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from rbac_core.exceptions import DepartmentNotFoundError, InactiveRoleError, RoleNotFoundError
from rbac_core.models.domain.assignment import Assignment, AssignmentWithRole
from rbac_core.models.domain.authorization import (
    EffectivePermissions,
    PermissionCheck,
    PermissionCheckRequest,
    PermissionCheckResult,
)
from rbac_core.models.domain.permission import Permission
from rbac_core.models.domain.role import Role
from rbac_core.repositories.department_repository import DepartmentRepository
from rbac_core.repositories.role_repository import RoleRepository
from rbac_core.repositories.user_role_repository import UserRoleRepository
from rbac_core.security.permission_evaluator import evaluate, has_capability
from rbac_core.services.audit_service import AuditAction, AuditService, ResourceType
from rbac_core.utils.permission_codes import permission_code
from rbac_core.utils.secure_logging import log_access_denied

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Answers "may this user do this?" and manages who holds which role.

    Evaluation reads the store on every call; nothing is cached here.
    Callers that need many coarse answers should take a snapshot with
    :meth:`get_effective_permissions` and query it locally.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_role_repo: UserRoleRepository | None = None,
        role_repo: RoleRepository | None = None,
        department_repo: DepartmentRepository | None = None,
        audit: AuditService | None = None,
    ) -> None:
        """Initialize service with database session."""
        self.session = session
        self.user_role_repo = user_role_repo or UserRoleRepository(session)
        self.role_repo = role_repo or RoleRepository(session)
        self.department_repo = department_repo or DepartmentRepository(session)
        self.audit = audit

    # =========================================================================
    # Assignments
    # =========================================================================

    async def assign_role(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
        expires_at: datetime | None = None,
        assigned_by: UUID | None = None,
    ) -> Assignment:
        """Assign a role to a user, globally or within one department.

        Re-assigning an existing (user, role, department) key reactivates
        that row and refreshes its expiry, assigner and assignment time.

        Args:
            user_id: User receiving the role
            role_id: Role to assign
            department_id: Department scope, or None for a global assignment
            expires_at: When the assignment stops being effective
            assigned_by: ID of the assigning user

        Returns:
            The active assignment

        Raises:
            RoleNotFoundError: If the role does not exist
            InactiveRoleError: If the role is deactivated
            DepartmentNotFoundError: If the department does not exist
        """
        role = await self.role_repo.get_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        if not role.is_active:
            raise InactiveRoleError(role.code)
        if department_id is not None and not await self.department_repo.exists(department_id):
            raise DepartmentNotFoundError(department_id)

        assignment = await self.user_role_repo.assign(
            user_id,
            role_id,
            department_id=department_id,
            expires_at=expires_at,
            assigned_by=assigned_by,
        )
        await self.session.commit()

        logger.info(f"Role {role.code} assigned to user {user_id}")
        if self.audit:
            self.audit.admin_change(
                AuditAction.ROLE_ASSIGN,
                ResourceType.ASSIGNMENT,
                resource_id=assignment.id,
                actor_id=assigned_by,
                target_user_id=user_id,
                details={
                    "role": role.code,
                    "department_id": str(department_id) if department_id else None,
                },
            )
        return Assignment.model_validate(assignment)

    async def revoke_role(
        self,
        user_id: UUID,
        role_id: UUID,
        department_id: UUID | None = None,
        revoked_by: UUID | None = None,
    ) -> int:
        """Deactivate a user's assignment of a role. Idempotent.

        Args:
            user_id: User losing the role
            role_id: Role to revoke
            department_id: Department scope, or None for the global assignment
            revoked_by: ID of the revoking user

        Returns:
            Number of assignment rows deactivated
        """
        revoked = await self.user_role_repo.revoke(user_id, role_id, department_id)
        await self.session.commit()

        if revoked:
            logger.info(f"Role {role_id} revoked from user {user_id}")
            if self.audit:
                self.audit.admin_change(
                    AuditAction.ROLE_REVOKE,
                    ResourceType.ASSIGNMENT,
                    actor_id=revoked_by,
                    target_user_id=user_id,
                    details={
                        "role_id": str(role_id),
                        "department_id": str(department_id) if department_id else None,
                    },
                )
        return revoked

    async def get_user_roles(self, user_id: UUID) -> list[AssignmentWithRole]:
        """Get every assignment currently in force for a user, in any department."""
        assignments = await self.user_role_repo.get_effective_assignments(
            user_id, any_department=True
        )
        return [AssignmentWithRole.model_validate(a) for a in assignments]

    async def get_users_by_role(
        self, role_id: UUID, department_id: UUID | None = None
    ) -> list[Assignment]:
        """Get the assignments of a role currently in force.

        Raises:
            RoleNotFoundError: If the role does not exist
        """
        if not await self.role_repo.exists(role_id):
            raise RoleNotFoundError(role_id)
        assignments = await self.user_role_repo.get_effective_assignments_for_role(
            role_id, department_id
        )
        return [Assignment.model_validate(a) for a in assignments]

    # =========================================================================
    # Evaluation
    # =========================================================================

    async def get_user_permissions(
        self,
        user_id: UUID,
        department_id: UUID | None = None,
    ) -> list[Permission]:
        """Gather the distinct active permissions in force for a department context.

        Global assignments always contribute; assignments scoped to
        ``department_id`` contribute too.
        """
        permissions = await self.user_role_repo.get_effective_permissions(user_id, department_id)
        return [Permission.model_validate(p) for p in permissions]

    async def check_permission(self, request: PermissionCheckRequest) -> PermissionCheckResult:
        """Decide whether a user may perform an action on a resource.

        Denial is returned, never raised. An OWN-scoped match denies
        access to resources owned by another user.

        Args:
            request: User, resource, action and optional department/owner

        Returns:
            PermissionCheckResult with the matched permission and scope
        """
        permissions = await self.get_user_permissions(
            request.user_id, request.target_department_id
        )
        result = evaluate(
            permissions,
            request.user_id,
            request.resource,
            request.action,
            target_owner_id=request.target_owner_id,
        )

        if not result.allowed:
            log_access_denied(
                logger,
                request.user_id,
                permission_code(request.resource, request.action),
                result.reason,
                department_id=request.target_department_id,
            )
        if self.audit:
            self.audit.access_decision(request, result)
        return result

    async def check_permissions(
        self,
        user_id: UUID,
        checks: Iterable[PermissionCheck],
    ) -> dict[str, bool]:
        """Answer several coarse capability checks at once.

        Permissions are gathered once across every department the user
        holds roles in. Only the exact-or-MANAGE rule applies; scope and
        ownership are not validated, so use :meth:`check_permission` to
        gate an actual operation.

        Args:
            user_id: User being checked
            checks: Resource/action pairs

        Returns:
            Mapping of canonical ``resource:action`` code to the answer
        """
        permissions = [
            Permission.model_validate(p)
            for p in await self.user_role_repo.get_effective_permissions(
                user_id, any_department=True
            )
        ]
        return {
            check.code: has_capability(permissions, check.resource, check.action)
            for check in checks
        }

    async def has_role(
        self,
        user_id: UUID,
        role_code: str,
        department_id: UUID | None = None,
    ) -> bool:
        """Whether the user holds a role globally or in ``department_id``."""
        return await self.user_role_repo.has_role(user_id, role_code, department_id)

    async def has_permission(
        self,
        user_id: UUID,
        code: str,
        department_id: UUID | None = None,
    ) -> bool:
        """Whether an assignment in force grants the permission with this catalog code."""
        return await self.user_role_repo.has_permission_code(user_id, code, department_id)

    # =========================================================================
    # Aggregation
    # =========================================================================

    async def get_effective_permissions(self, user_id: UUID) -> EffectivePermissions:
        """Build a snapshot of everything the user currently holds.

        All assignments in force count, regardless of department. Roles are
        also bucketed by the department they are scoped to; global
        assignments appear only in the flat lists.

        Args:
            user_id: User UUID

        Returns:
            EffectivePermissions snapshot
        """
        grants = await self.user_role_repo.get_effective_grants(user_id)

        roles: dict[UUID, Role] = {}
        permissions: dict[UUID, Permission] = {}
        department_roles: dict[UUID, list[Role]] = {}
        for assignment, permission in grants:
            if permission is not None and permission.id not in permissions:
                permissions[permission.id] = Permission.model_validate(permission)
            role = roles.get(assignment.role_id)
            if role is None:
                role = Role.model_validate(assignment.role)
                roles[role.id] = role
            if assignment.department_id is not None:
                bucket = department_roles.setdefault(assignment.department_id, [])
                if all(existing.id != role.id for existing in bucket):
                    bucket.append(role)

        return EffectivePermissions(
            user_id=user_id,
            permissions=sorted(permissions.values(), key=lambda p: p.code),
            roles=list(roles.values()),
            department_roles=department_roles,
            computed_at=datetime.now(timezone.utc),
        )
