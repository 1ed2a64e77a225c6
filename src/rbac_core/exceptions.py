"""Domain-specific exceptions for the RBAC core.

These exceptions separate service-layer failures from HTTP responses.
Access denial from the evaluation engine is a result value, not an
exception; PermissionDeniedError is raised only by request guards.
"""

from typing import Any
from uuid import UUID


class RbacError(Exception):
    """Base exception for all RBAC core errors."""

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(RbacError):
    """Base class for resource not found errors."""

    pass


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission cannot be found."""

    def __init__(
        self, permission_id: UUID | str | None = None, permission_code: str | None = None
    ) -> None:
        message = "Permission not found"
        details: dict[str, Any] = {}
        if permission_id:
            details["permission_id"] = str(permission_id)
        if permission_code:
            details["permission_code"] = permission_code
        super().__init__(message, details)


class RoleNotFoundError(NotFoundError):
    """Raised when a role cannot be found."""

    def __init__(self, role_id: UUID | str | None = None, role_code: str | None = None) -> None:
        message = "Role not found"
        details: dict[str, Any] = {}
        if role_id:
            details["role_id"] = str(role_id)
        if role_code:
            details["role_code"] = role_code
        super().__init__(message, details)


class ParentRoleNotFoundError(NotFoundError):
    """Raised when a referenced parent role does not exist."""

    def __init__(self, parent_role_id: UUID | str | None = None) -> None:
        details = {"parent_role_id": str(parent_role_id)} if parent_role_id else {}
        super().__init__("Parent role not found", details)


class DepartmentNotFoundError(NotFoundError):
    """Raised when a department cannot be found."""

    def __init__(self, department_id: UUID | str | None = None) -> None:
        details = {"department_id": str(department_id)} if department_id else {}
        super().__init__("Department not found", details)


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(RbacError):
    """Base class for resource conflict errors."""

    pass


class DuplicateCodeError(ConflictError):
    """Raised when a create collides with an existing unique code."""

    pass


class PermissionAlreadyExistsError(DuplicateCodeError):
    """Raised when trying to create a permission that already exists."""

    def __init__(self, code: str | None = None) -> None:
        message = "Permission code already exists"
        details = {"code": code} if code else {}
        super().__init__(message, details)


class RoleAlreadyExistsError(DuplicateCodeError):
    """Raised when trying to create a role that already exists."""

    def __init__(self, code: str | None = None) -> None:
        message = "Role code already exists"
        details = {"code": code} if code else {}
        super().__init__(message, details)


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(RbacError):
    """Base class for validation errors."""

    pass


class InvalidParentRoleError(ValidationError):
    """Raised when a role would become its own parent or the parent is missing."""

    def __init__(self, role_id: UUID | str | None = None, parent_role_id: UUID | str | None = None) -> None:
        details: dict[str, Any] = {}
        if role_id:
            details["role_id"] = str(role_id)
        if parent_role_id:
            details["parent_role_id"] = str(parent_role_id)
        super().__init__("Invalid parent role", details)


class InactiveRoleError(ValidationError):
    """Raised when assigning a role that is deactivated."""

    def __init__(self, role_code: str | None = None) -> None:
        details = {"role_code": role_code} if role_code else {}
        super().__init__("Cannot assign inactive role", details)


class InvalidPermissionCodeError(ValidationError):
    """Raised when a permission code cannot be parsed."""

    def __init__(self, code: str | None = None) -> None:
        details = {"code": code} if code is not None else {}
        super().__init__("Invalid permission code", details)


# =============================================================================
# Permission Errors (403)
# =============================================================================


class SystemProtectedError(RbacError):
    """Base class for attempts to disable or delete system entries."""

    pass


class CannotModifySystemRoleError(SystemProtectedError):
    """Raised when trying to deactivate or delete a system role."""

    def __init__(self, role_code: str | None = None) -> None:
        message = "Cannot modify system role"
        details = {"role_code": role_code} if role_code else {}
        super().__init__(message, details)


class CannotModifySystemPermissionError(SystemProtectedError):
    """Raised when trying to deactivate or delete a system permission."""

    def __init__(self, permission_code: str | None = None) -> None:
        message = "Cannot modify system permission"
        details = {"permission_code": permission_code} if permission_code else {}
        super().__init__(message, details)


class PermissionDeniedError(RbacError):
    """Raised by request guards when a permission check denies access.

    The reason is kept for logs and never returned to the client.
    """

    def __init__(self, reason: str | None = None, details: dict[str, Any] | None = None) -> None:
        self.reason = reason
        super().__init__("Access denied", details)
