"""
Material business logic service.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.errors import ConflictError
from nubestock.models.material import Material
from nubestock.repositories.material_repository import MaterialRepository
from nubestock.schemas.material import MaterialCreate

logger = logging.getLogger(__name__)

DUPLICATE_CODE_MESSAGE = "A material with this code already exists"


class MaterialService:
    """Service for material business logic."""

    def __init__(self, db: AsyncSession):
        self.repository = MaterialRepository(db)

    async def list_materials(
        self,
        material_type: Optional[str] = None,
        idorigin: Optional[UUID] = None,
    ) -> List[Material]:
        return await self.repository.list(material_type=material_type, idorigin=idorigin)

    async def create_material(self, data: MaterialCreate) -> Material:
        if await self.repository.get_by_code(data.material_code):
            raise ConflictError(DUPLICATE_CODE_MESSAGE)

        values = data.model_dump()
        if values.get("isactive") is None:
            values["isactive"] = True
        try:
            material = await self.repository.create(values)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_CODE_MESSAGE) from exc

        logger.info("Material created: %s", material.material_code)
        return material
