"""Permission domain model."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from rbac_core.models.domain.enums import Action, Resource, Scope


class Permission(BaseModel):
    """Permission domain model."""

    id: UUID
    code: str
    name: str
    description: str | None = None
    resource: Resource
    action: Action
    scope: Scope = Scope.OWN
    is_active: bool = True
    is_system: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        """Pydantic config."""

        from_attributes = True
