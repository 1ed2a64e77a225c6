"""Pure permission matching rules.

These functions decide a check from an already-gathered permission set.
They never touch the database, so callers holding a cached snapshot can
reuse them locally.
"""

from collections.abc import Iterable
from uuid import UUID

from rbac_core.models.domain.authorization import PermissionCheckResult
from rbac_core.models.domain.enums import Action, Resource, Scope
from rbac_core.models.domain.permission import Permission
from rbac_core.utils.permission_codes import permission_code

OWN_SCOPE_DENIAL_REASON = "Permission scope restricted to own resources"


def no_permission_reason(resource: Resource, action: Action) -> str:
    """Denial reason naming the missing resource/action pair."""
    return f"No permission for {permission_code(resource, action)}"


def broadest(permissions: Iterable[Permission]) -> Permission | None:
    """Pick the permission with the widest scope (ALL > DEPARTMENT > OWN).

    Ties keep the first candidate; the decision is the same either way.
    """
    selected: Permission | None = None
    for permission in permissions:
        if selected is None or permission.scope.priority > selected.scope.priority:
            selected = permission
    return selected


def find_match(
    permissions: Iterable[Permission], resource: Resource, action: Action
) -> Permission | None:
    """Find the permission that satisfies ``(resource, action)``.

    Exact matches win over MANAGE. Without an exact match, a MANAGE
    permission on the same resource matches any action. Among several
    candidates of the same kind, the broadest scope is chosen.

    Args:
        permissions: Effective permission set
        resource: Requested resource
        action: Requested action

    Returns:
        The matching permission, or None
    """
    exact: list[Permission] = []
    manage: list[Permission] = []
    for permission in permissions:
        if permission.resource != resource:
            continue
        if permission.action == action:
            exact.append(permission)
        elif permission.action == Action.MANAGE:
            manage.append(permission)
    return broadest(exact) or broadest(manage)


def evaluate(
    permissions: Iterable[Permission],
    user_id: UUID,
    resource: Resource,
    action: Action,
    target_owner_id: UUID | None = None,
) -> PermissionCheckResult:
    """Decide a single permission check.

    An OWN-scoped match denies access to resources owned by someone else;
    the result still reports the matched permission and its scope.
    DEPARTMENT and ALL scopes are not validated further here.

    Args:
        permissions: Effective permission set for the target department
        user_id: User being checked
        resource: Requested resource
        action: Requested action
        target_owner_id: Owner of the acted-upon resource, if known

    Returns:
        PermissionCheckResult
    """
    matched = find_match(permissions, resource, action)
    if matched is None:
        return PermissionCheckResult(
            allowed=False,
            reason=no_permission_reason(resource, action),
        )

    if (
        matched.scope == Scope.OWN
        and target_owner_id is not None
        and target_owner_id != user_id
    ):
        return PermissionCheckResult(
            allowed=False,
            reason=OWN_SCOPE_DENIAL_REASON,
            matched_permission=matched,
            effective_scope=matched.scope,
        )

    return PermissionCheckResult(
        allowed=True,
        matched_permission=matched,
        effective_scope=matched.scope,
    )


def has_capability(permissions: Iterable[Permission], resource: Resource, action: Action) -> bool:
    """Coarse exact-or-MANAGE check with no scope or ownership validation."""
    return find_match(permissions, resource, action) is not None
