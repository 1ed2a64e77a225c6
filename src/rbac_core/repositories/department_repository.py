"""Department repository."""

from sqlalchemy import select

from rbac_core.models.orm.department import DepartmentORM
from rbac_core.repositories.base import BaseRepository


class DepartmentRepository(BaseRepository[DepartmentORM]):
    """Repository for department lookups."""

    model = DepartmentORM

    async def get_by_code(self, code: str) -> DepartmentORM | None:
        """Get department by code.

        Args:
            code: Department code

        Returns:
            DepartmentORM or None if not found
        """
        result = await self.session.execute(select(DepartmentORM).where(DepartmentORM.code == code))
        return result.scalar_one_or_none()
