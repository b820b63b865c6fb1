"""
Materials router - API endpoints for raw materials and packaging.
"""

from typing import Any, List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.dependencies import get_db, get_material_bulk_service, get_material_service
from nubestock.schemas.base import ApiResponse
from nubestock.schemas.material import MaterialCreate, MaterialRead
from nubestock.services.bulk_response import build_bulk_response, bulk_response_content
from nubestock.services.bulk_upload_service import BulkUploadService
from nubestock.services.material_service import MaterialService

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get("", response_model=ApiResponse[List[MaterialRead]])
async def list_materials(
    service: MaterialService = Depends(get_material_service),
    material_type: Optional[Literal["raw", "packaging"]] = Query(None, alias="type"),
    idorigin: Optional[UUID] = None,
):
    """List active materials, optionally filtered by type and origin."""
    materials = await service.list_materials(material_type=material_type, idorigin=idorigin)
    return ApiResponse[List[MaterialRead]](data=[MaterialRead.model_validate(m) for m in materials])


@router.post("", response_model=ApiResponse[MaterialRead], status_code=status.HTTP_201_CREATED)
async def create_material(
    data: MaterialCreate,
    db: AsyncSession = Depends(get_db),
    service: MaterialService = Depends(get_material_service),
):
    """Create a new material."""
    material = await service.create_material(data)
    await db.commit()
    return ApiResponse[MaterialRead](
        message="Material created successfully",
        data=MaterialRead.model_validate(material),
    )


@router.post("/bulk")
async def bulk_upload_materials(
    body: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    service: BulkUploadService = Depends(get_material_bulk_service),
):
    """Create or update many materials keyed by material code."""
    result = await service.upload(body)
    await db.commit()
    status_code, response = build_bulk_response(result, "material")
    return JSONResponse(status_code=status_code, content=bulk_response_content(response))
