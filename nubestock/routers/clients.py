"""
Clients router - API endpoints for customers.
"""

from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.dependencies import get_client_bulk_service, get_client_service, get_db
from nubestock.schemas.base import ApiResponse
from nubestock.schemas.client import ClientCreate, ClientRead, ClientUpdate
from nubestock.services.bulk_response import build_bulk_response, bulk_response_content
from nubestock.services.bulk_upload_service import BulkUploadService
from nubestock.services.client_service import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=ApiResponse[List[ClientRead]])
async def list_clients(
    service: ClientService = Depends(get_client_service),
    search: Optional[str] = None,
    isactive: Optional[bool] = None,
):
    """List clients. Search matches name, business name, RUC and email."""
    clients = await service.list_clients(search=search, isactive=isactive)
    return ApiResponse[List[ClientRead]](data=[ClientRead.model_validate(c) for c in clients])


@router.post("/bulk")
async def bulk_upload_clients(
    body: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    service: BulkUploadService = Depends(get_client_bulk_service),
):
    """
    Create or update many clients keyed by RUC/cedula.

    A client whose RUC is unknown but whose email matches is updated.
    """
    result = await service.upload(body)
    await db.commit()
    status_code, response = build_bulk_response(result, "client")
    return JSONResponse(status_code=status_code, content=bulk_response_content(response))


@router.get("/{client_id}", response_model=ApiResponse[ClientRead])
async def get_client(client_id: UUID, service: ClientService = Depends(get_client_service)):
    client = await service.get_client(client_id)
    return ApiResponse[ClientRead](data=ClientRead.model_validate(client))


@router.post("", response_model=ApiResponse[ClientRead], status_code=status.HTTP_201_CREATED)
async def create_client(
    data: ClientCreate,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
):
    client = await service.create_client(data)
    await db.commit()
    return ApiResponse[ClientRead](message="Client created successfully", data=ClientRead.model_validate(client))


@router.put("/{client_id}", response_model=ApiResponse[ClientRead])
async def update_client(
    client_id: UUID,
    data: ClientUpdate,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
):
    client = await service.update_client(client_id, data)
    await db.commit()
    return ApiResponse[ClientRead](message="Client updated successfully", data=ClientRead.model_validate(client))


@router.delete("/{client_id}", response_model=ApiResponse[None])
async def delete_client(
    client_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
):
    """Delete a client permanently."""
    await service.delete_client(client_id)
    await db.commit()
    return ApiResponse[None](message="Client deleted successfully")
