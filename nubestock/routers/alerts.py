"""
Alerts router - API endpoints for alert listing and lifecycle.
"""

from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.dependencies import get_alert_service, get_db
from nubestock.schemas.alert import AlertRead, AlertResolve, AlertUpdate
from nubestock.schemas.base import ApiResponse
from nubestock.services.alert_service import AlertService

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=ApiResponse[List[AlertRead]])
async def list_alerts(
    service: AlertService = Depends(get_alert_service),
    isactive: Optional[bool] = None,
    status: Optional[Literal["active", "acknowledged", "resolved", "dismissed"]] = None,
    entity_type: Optional[str] = None,
    priority: Optional[Literal["low", "medium", "high", "critical"]] = None,
):
    """List alerts, newest first."""
    alerts = await service.list_alerts(
        isactive=isactive,
        status=status,
        entity_type=entity_type,
        priority=priority,
    )
    return ApiResponse[List[AlertRead]](data=[AlertRead.model_validate(a) for a in alerts])


@router.get("/{alert_id}", response_model=ApiResponse[AlertRead])
async def get_alert(alert_id: UUID, service: AlertService = Depends(get_alert_service)):
    alert = await service.get_alert(alert_id)
    return ApiResponse[AlertRead](data=AlertRead.model_validate(alert))


@router.put("/{alert_id}", response_model=ApiResponse[AlertRead])
async def update_alert(
    alert_id: UUID,
    data: AlertUpdate,
    db: AsyncSession = Depends(get_db),
    service: AlertService = Depends(get_alert_service),
):
    """
    Update status and/or priority.

    ``resolved`` and ``dismissed`` close the alert; ``resolved`` also
    records when and by whom. ``active`` and ``acknowledged`` reopen it.
    """
    alert = await service.update_alert(alert_id, data)
    await db.commit()
    return ApiResponse[AlertRead](message="Alert updated successfully", data=AlertRead.model_validate(alert))


@router.put("/{alert_id}/acknowledge", response_model=ApiResponse[AlertRead])
async def acknowledge_alert(
    alert_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: AlertService = Depends(get_alert_service),
):
    alert = await service.acknowledge(alert_id)
    await db.commit()
    return ApiResponse[AlertRead](message="Alert acknowledged", data=AlertRead.model_validate(alert))


@router.put("/{alert_id}/resolve", response_model=ApiResponse[AlertRead])
async def resolve_alert(
    alert_id: UUID,
    data: Optional[AlertResolve] = Body(None),
    db: AsyncSession = Depends(get_db),
    service: AlertService = Depends(get_alert_service),
):
    alert = await service.resolve(alert_id, data.resolved_by if data else None)
    await db.commit()
    return ApiResponse[AlertRead](message="Alert resolved", data=AlertRead.model_validate(alert))


@router.put("/{alert_id}/dismiss", response_model=ApiResponse[AlertRead])
async def dismiss_alert(
    alert_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: AlertService = Depends(get_alert_service),
):
    alert = await service.dismiss(alert_id)
    await db.commit()
    return ApiResponse[AlertRead](message="Alert dismissed", data=AlertRead.model_validate(alert))


@router.delete("/{alert_id}", response_model=ApiResponse[None])
async def delete_alert(
    alert_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: AlertService = Depends(get_alert_service),
):
    await service.delete_alert(alert_id)
    await db.commit()
    return ApiResponse[None](message="Alert deleted successfully")
