"""Role assignment domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from rbac_core.models.domain.role import Role


class Assignment(BaseModel):
    """A user's role assignment, global when ``department_id`` is None."""

    id: UUID
    user_id: UUID
    role_id: UUID
    department_id: UUID | None = None
    assigned_by: UUID | None = None
    assigned_at: datetime
    expires_at: datetime | None = None
    is_active: bool = True

    class Config:
        """Pydantic config."""

        from_attributes = True

    @property
    def is_global(self) -> bool:
        """Whether the assignment applies in every department."""
        return self.department_id is None


class AssignmentWithRole(Assignment):
    """Assignment together with the assigned role."""

    role: Role
