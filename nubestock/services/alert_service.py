"""
Alert business logic service.

Closing an alert (resolved or dismissed) clears ``isactive``, which frees
the (entity, alert type) slot for the next low-stock alert. Moving it back
to active or acknowledged takes the slot again, which fails with a conflict
while another alert holds it.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.errors import ConflictError, NotFoundError
from nubestock.models.alert import Alert, AlertStatus
from nubestock.repositories.alert_repository import AlertRepository
from nubestock.schemas.alert import AlertUpdate
from nubestock.utils.formatting import utc_now

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "Another active alert already exists for this entity"


def status_change(status: str, resolved_by: Optional[UUID] = None) -> Dict[str, Any]:
    """Columns written when an alert moves to ``status``."""
    values: Dict[str, Any] = {"status": status, "isactive": status not in AlertStatus.CLOSED}
    if status == AlertStatus.RESOLVED:
        values["resolved_at"] = utc_now()
        values["resolved_by"] = resolved_by
    elif status not in AlertStatus.CLOSED:
        # reopened alerts drop any earlier resolution
        values["resolved_at"] = None
        values["resolved_by"] = None
    return values


class AlertService:
    """Service for alert business logic."""

    def __init__(self, db: AsyncSession):
        self.repository = AlertRepository(db)

    async def list_alerts(
        self,
        isactive: Optional[bool] = None,
        status: Optional[str] = None,
        entity_type: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Alert]:
        return await self.repository.list(
            isactive=isactive,
            status=status,
            entity_type=entity_type,
            priority=priority,
        )

    async def get_alert(self, alert_id: UUID) -> Alert:
        alert = await self.repository.get_by_id(alert_id)
        if not alert:
            raise NotFoundError("Alert not found")
        return alert

    async def update_alert(self, alert_id: UUID, data: AlertUpdate) -> Alert:
        """Change status and/or priority. Body flags act as lifecycle shortcuts."""
        if data.acknowledge:
            return await self.acknowledge(alert_id)
        if data.resolve:
            return await self.resolve(alert_id, data.resolved_by)
        if data.dismiss:
            return await self.dismiss(alert_id)

        alert = await self.get_alert(alert_id)
        values: Dict[str, Any] = {}
        if data.priority is not None:
            values["priority"] = data.priority
        if data.status is not None:
            values.update(status_change(data.status, data.resolved_by))
        return await self._write(alert, values)

    async def acknowledge(self, alert_id: UUID) -> Alert:
        return await self._move(alert_id, AlertStatus.ACKNOWLEDGED)

    async def resolve(self, alert_id: UUID, resolved_by: Optional[UUID] = None) -> Alert:
        return await self._move(alert_id, AlertStatus.RESOLVED, resolved_by)

    async def dismiss(self, alert_id: UUID) -> Alert:
        return await self._move(alert_id, AlertStatus.DISMISSED)

    async def delete_alert(self, alert_id: UUID) -> None:
        alert = await self.get_alert(alert_id)
        await self.repository.delete(alert)

    async def _move(self, alert_id: UUID, status: str, resolved_by: Optional[UUID] = None) -> Alert:
        alert = await self.get_alert(alert_id)
        alert = await self._write(alert, status_change(status, resolved_by))
        logger.info("Alert %s moved to %s", alert_id, status)
        return alert

    async def _write(self, alert: Alert, values: Dict[str, Any]) -> Alert:
        try:
            return await self.repository.update(alert, values)
        except IntegrityError as exc:
            raise ConflictError(SLOT_TAKEN_MESSAGE) from exc
