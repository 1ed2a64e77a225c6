"""Permission check requests, decisions and effective-permission snapshots."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_core.models.domain.enums import Action, Resource, Scope
from rbac_core.models.domain.permission import Permission
from rbac_core.models.domain.role import Role
from rbac_core.utils.permission_codes import permission_code


class PermissionCheckRequest(BaseModel):
    """Single permission check against a user."""

    user_id: UUID
    resource: Resource
    action: Action
    target_department_id: UUID | None = None
    target_owner_id: UUID | None = None


class PermissionCheck(BaseModel):
    """One (resource, action) pair of a batch check."""

    resource: Resource
    action: Action

    @property
    def code(self) -> str:
        return permission_code(self.resource, self.action)


class PermissionCheckResult(BaseModel):
    """Outcome of a permission check.

    A denial is a normal result: ``allowed`` is False and ``reason`` says
    why. When a permission matched but scope validation failed, the matched
    permission and its scope are still reported.
    """

    allowed: bool
    reason: str | None = None
    matched_permission: Permission | None = None
    effective_scope: Scope | None = None


class EffectivePermissions(BaseModel):
    """Snapshot of everything a user currently holds.

    Meant to be cached for a request or session and queried locally with
    :meth:`has_permission` and :meth:`has_role`.
    """

    user_id: UUID
    permissions: list[Permission] = []
    roles: list[Role] = []
    department_roles: dict[UUID, list[Role]] = Field(default_factory=dict)
    computed_at: datetime

    @property
    def permission_codes(self) -> set[str]:
        return {permission.code for permission in self.permissions}

    @property
    def role_codes(self) -> set[str]:
        return {role.code for role in self.roles}

    def has_permission(self, resource: Resource, action: Action) -> bool:
        """Coarse exact-or-MANAGE check, without scope validation."""
        for permission in self.permissions:
            if permission.resource != resource:
                continue
            if permission.action == action or permission.action == Action.MANAGE:
                return True
        return False

    def has_role(self, role_code: str) -> bool:
        """Whether the user holds the role in any department or globally."""
        return role_code in self.role_codes
