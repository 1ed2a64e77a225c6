"""Request guards built on the authorization service.

Authentication belongs to the host application: it must put the caller's
user ID on ``request.state.user_id`` before these guards run.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status

from rbac_core.dependencies import get_authorization_service
from rbac_core.exceptions import PermissionDeniedError
from rbac_core.models.domain.authorization import (
    PermissionCheck,
    PermissionCheckRequest,
    PermissionCheckResult,
)
from rbac_core.models.domain.enums import Action, Resource
from rbac_core.services.authorization_service import AuthorizationService

logger = logging.getLogger(__name__)

OwnerResolver = Callable[[Request], UUID | None | Awaitable[UUID | None]]


async def get_current_user_id(request: Request) -> UUID:
    """Get the authenticated user's ID from the request state.

    Raises:
        HTTPException: 401 if the host did not authenticate the request
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        ) from e


def _uuid_param(request: Request, name: str | None) -> UUID | None:
    """Read a UUID from the path or query string."""
    if name is None:
        return None
    raw = request.path_params.get(name) or request.query_params.get(name)
    if raw is None:
        return None
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request",
        ) from e


async def _resolve_owner(resolver: OwnerResolver | None, request: Request) -> UUID | None:
    if resolver is None:
        return None
    owner_id = resolver(request)
    if inspect.isawaitable(owner_id):
        owner_id = await owner_id
    return owner_id


# =============================================================================
# Helpers
# =============================================================================


async def can(
    service: AuthorizationService,
    user_id: UUID,
    resource: Resource,
    action: Action,
    department_id: UUID | None = None,
    owner_id: UUID | None = None,
) -> bool:
    """Whether the user may perform the action, with full scope validation."""
    result = await service.check_permission(
        PermissionCheckRequest(
            user_id=user_id,
            resource=resource,
            action=action,
            target_department_id=department_id,
            target_owner_id=owner_id,
        )
    )
    return result.allowed


async def can_any(
    service: AuthorizationService,
    user_id: UUID,
    checks: Iterable[tuple[Resource, Action]],
) -> bool:
    """Whether the user holds at least one of the capabilities (coarse check)."""
    answers = await service.check_permissions(
        user_id, [PermissionCheck(resource=r, action=a) for r, a in checks]
    )
    return any(answers.values())


async def can_all(
    service: AuthorizationService,
    user_id: UUID,
    checks: Iterable[tuple[Resource, Action]],
) -> bool:
    """Whether the user holds every one of the capabilities (coarse check)."""
    answers = await service.check_permissions(
        user_id, [PermissionCheck(resource=r, action=a) for r, a in checks]
    )
    return bool(answers) and all(answers.values())


async def has_any_role(
    service: AuthorizationService,
    user_id: UUID,
    role_codes: Iterable[str],
    department_id: UUID | None = None,
) -> bool:
    """Whether the user holds at least one of the roles."""
    for role_code in role_codes:
        if await service.has_role(user_id, role_code, department_id):
            return True
    return False


# =============================================================================
# FastAPI Dependencies
# =============================================================================


def require_permission(
    resource: Resource,
    action: Action,
    department_param: str | None = None,
    owner_resolver: OwnerResolver | None = None,
):
    """FastAPI dependency requiring a permission, with scope validation.

    Usage:
        @router.post("/departments/{department_id}/claims/{claim_id}/approve")
        async def approve_claim(
            check: Annotated[
                PermissionCheckResult,
                Depends(require_permission(
                    Resource.EXPENSE_CLAIM, Action.APPROVE, department_param="department_id"
                )),
            ],
        ):
            ...

    Args:
        resource: Resource being acted on
        action: Action being performed
        department_param: Path or query parameter holding the target department
        owner_resolver: Callable returning the owner of the target resource

    Returns:
        Dependency returning the PermissionCheckResult when access is allowed

    Raises:
        PermissionDeniedError: When the check denies access
    """

    async def permission_dependency(
        request: Request,
        user_id: Annotated[UUID, Depends(get_current_user_id)],
        service: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> PermissionCheckResult:
        check = PermissionCheckRequest(
            user_id=user_id,
            resource=resource,
            action=action,
            target_department_id=_uuid_param(request, department_param),
            target_owner_id=await _resolve_owner(owner_resolver, request),
        )
        result = await service.check_permission(check)
        if not result.allowed:
            raise PermissionDeniedError(
                result.reason,
                details={"user_id": str(user_id), "resource": resource.value, "action": action.value},
            )
        return result

    return permission_dependency


def require_any_permission(checks: list[tuple[Resource, Action]]):
    """FastAPI dependency requiring ANY of the capabilities (coarse check).

    Returns:
        Dependency returning the current user ID
    """

    async def permission_dependency(
        user_id: Annotated[UUID, Depends(get_current_user_id)],
        service: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UUID:
        if not await can_any(service, user_id, checks):
            raise PermissionDeniedError(f"Requires one of {_codes(checks)}")
        return user_id

    return permission_dependency


def require_all_permissions(checks: list[tuple[Resource, Action]]):
    """FastAPI dependency requiring ALL of the capabilities (coarse check).

    Returns:
        Dependency returning the current user ID
    """

    async def permission_dependency(
        user_id: Annotated[UUID, Depends(get_current_user_id)],
        service: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UUID:
        if not await can_all(service, user_id, checks):
            raise PermissionDeniedError(f"Requires all of {_codes(checks)}")
        return user_id

    return permission_dependency


def require_role(role_code: str, department_param: str | None = None):
    """FastAPI dependency requiring a role, globally or in the target department.

    Returns:
        Dependency returning the current user ID
    """

    async def role_dependency(
        request: Request,
        user_id: Annotated[UUID, Depends(get_current_user_id)],
        service: Annotated[AuthorizationService, Depends(get_authorization_service)],
    ) -> UUID:
        department_id = _uuid_param(request, department_param)
        if not await service.has_role(user_id, role_code, department_id):
            raise PermissionDeniedError(f"Requires role {role_code}")
        return user_id

    return role_dependency


def _codes(checks: Iterable[tuple[Resource, Action]]) -> str:
    return ", ".join(PermissionCheck(resource=r, action=a).code for r, a in checks)
