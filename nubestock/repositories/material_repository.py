"""
Material repository - database operations for Material.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.models.material import Material


class MaterialRepository:
    """Repository for Material database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        material_type: Optional[str] = None,
        idorigin: Optional[UUID] = None,
    ) -> List[Material]:
        """List active materials, optionally filtered by type and origin."""
        query = select(Material).where(Material.isactive.is_(True))
        if material_type is not None:
            query = query.where(Material.material_type == material_type)
        if idorigin is not None:
            query = query.where(Material.idorigin == idorigin)

        result = await self.db.execute(query.order_by(Material.material_name.asc()))
        return list(result.scalars().all())

    async def get_by_code(self, material_code: str) -> Optional[Material]:
        result = await self.db.execute(select(Material).where(Material.material_code == material_code))
        return result.scalar_one_or_none()

    async def create(self, data: Dict[str, Any]) -> Material:
        material = Material(**data)
        self.db.add(material)
        await self.db.flush()
        await self.db.refresh(material)
        return material
