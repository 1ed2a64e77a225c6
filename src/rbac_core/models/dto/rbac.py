"""RBAC administration DTOs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from rbac_core.models.domain.enums import Action, Resource, Scope


# =============================================================================
# Permission catalog
# =============================================================================


class PermissionCreateRequest(BaseModel):
    """Permission creation request."""

    code: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    resource: Resource
    action: Action
    scope: Scope = Scope.OWN
    is_system: bool = False


class PermissionUpdateRequest(BaseModel):
    """Permission update request. Only fields explicitly set are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    scope: Scope | None = None
    is_active: bool | None = None


class PermissionFilter(BaseModel):
    """Filters for listing permissions."""

    resource: Resource | None = None
    action: Action | None = None
    scope: Scope | None = None
    is_active: bool | None = None
    search: str | None = Field(default=None, max_length=100)


# =============================================================================
# Role registry
# =============================================================================


class RoleCreateRequest(BaseModel):
    """Role creation request."""

    code: str = Field(min_length=2, max_length=50, pattern=r"^[a-z][a-z0-9_-]*$")
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    level: int = Field(default=0, ge=0, le=1000)
    parent_role_id: UUID | None = None
    is_system: bool = False


class RoleUpdateRequest(BaseModel):
    """Role update request.

    Only fields explicitly set are applied, so ``parent_role_id=None``
    clears the parent while omitting it leaves the parent unchanged.
    """

    name: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    level: int | None = Field(default=None, ge=0, le=1000)
    parent_role_id: UUID | None = None
    is_active: bool | None = None


class RoleFilter(BaseModel):
    """Filters for listing roles."""

    is_active: bool | None = None
    is_system: bool | None = None
    search: str | None = Field(default=None, max_length=100)
    min_level: int | None = None
    max_level: int | None = None


# =============================================================================
# Assignments
# =============================================================================


class RoleAssignRequest(BaseModel):
    """Assign a role to a user, globally or within a department."""

    user_id: UUID
    role_id: UUID
    department_id: UUID | None = None
    expires_at: datetime | None = None
