"""Data Transfer Objects package."""

from rbac_core.models.dto.rbac import (
    PermissionCreateRequest,
    PermissionFilter,
    PermissionUpdateRequest,
    RoleAssignRequest,
    RoleCreateRequest,
    RoleFilter,
    RoleUpdateRequest,
)

__all__ = [
    "PermissionCreateRequest",
    "PermissionFilter",
    "PermissionUpdateRequest",
    "RoleAssignRequest",
    "RoleCreateRequest",
    "RoleFilter",
    "RoleUpdateRequest",
]
