"""Role domain model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from rbac_core.models.domain.permission import Permission


class Role(BaseModel):
    """Role domain model without its grants."""

    id: UUID
    code: str
    name: str
    description: str | None = None
    level: int = 0
    parent_role_id: UUID | None = None
    is_active: bool = True
    is_system: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class RoleWithPermissions(Role):
    """Role together with its granted permissions."""

    permissions: list[Permission] = []
