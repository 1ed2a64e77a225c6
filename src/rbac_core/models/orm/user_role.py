"""User-Role assignment ORM model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rbac_core.models.orm.base import Base, UUIDMixin, utcnow


class UserRoleORM(Base, UUIDMixin):
    """Assignment of a role to a user, globally or within one department.

    A NULL ``department_id`` marks a global assignment. Users live in the
    host application, so ``user_id`` and ``assigned_by`` carry no foreign key.
    """

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    role_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    department_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=True,
    )
    assigned_by: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    role: Mapped["RoleORM"] = relationship("RoleORM")

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "role_id",
            "department_id",
            name="uq_user_roles_user_role_department",
            postgresql_nulls_not_distinct=True,
        ),
        Index("idx_user_roles_user_active", "user_id", "is_active"),
    )
