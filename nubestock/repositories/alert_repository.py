"""
Alert repository - database operations for Alert.

Also the store behind the low-stock alert deduplicator.
"""

import uuid
from typing import Any, Dict, List, Optional, Sequence, Set
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.models.alert import Alert
from nubestock.utils.formatting import utc_now


class AlertRepository:
    """Repository for Alert database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        isactive: Optional[bool] = None,
        status: Optional[str] = None,
        entity_type: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[Alert]:
        query = select(Alert)
        if isactive is not None:
            query = query.where(Alert.isactive.is_(isactive))
        if status is not None:
            query = query.where(Alert.status == status)
        if entity_type is not None:
            query = query.where(Alert.entity_type == entity_type)
        if priority is not None:
            query = query.where(Alert.priority == priority)

        result = await self.db.execute(query.order_by(Alert.creationdate.desc()))
        return list(result.scalars().all())

    async def get_by_id(self, alert_id: UUID) -> Optional[Alert]:
        result = await self.db.execute(select(Alert).where(Alert.idalert == alert_id))
        return result.scalar_one_or_none()

    async def update(self, alert: Alert, data: Dict[str, Any]) -> Alert:
        for field, value in data.items():
            setattr(alert, field, value)
        alert.modificationdate = utc_now()
        await self.db.flush()
        await self.db.refresh(alert)
        return alert

    async def delete(self, alert: Alert) -> None:
        await self.db.delete(alert)
        await self.db.flush()

    async def active_alert_entity_ids(
        self,
        entity_type: str,
        alert_type: str,
        entity_ids: Sequence[UUID],
    ) -> Set[UUID]:
        """
        Entity ids among ``entity_ids`` that already have an active alert of this type.

        Runs under a savepoint like ``insert_alerts``: alerting is a side effect
        and a failed lookup must not abort the caller's transaction.
        """
        if not entity_ids:
            return set()
        query = select(Alert.entity_id).where(
            Alert.entity_type == entity_type,
            Alert.alert_type == alert_type,
            Alert.isactive.is_(True),
            Alert.entity_id.in_(list(entity_ids)),
        )
        async with self.db.begin_nested():
            result = await self.db.execute(query)
            return set(result.scalars().all())

    async def insert_alerts(self, rows: List[Dict[str, Any]]) -> int:
        """
        Insert alerts, skipping any that collide with an active one.

        Runs under a savepoint so a failure leaves the caller's transaction
        usable. Returns the number of rows actually inserted.
        """
        if not rows:
            return 0

        values = [{**row, "idalert": row.get("idalert") or uuid.uuid4()} for row in rows]
        stmt = (
            pg_insert(Alert.__table__)
            .values(values)
            .on_conflict_do_nothing(
                index_elements=["entity_type", "entity_id", "alert_type"],
                index_where=text("isactive"),
            )
            .returning(Alert.__table__.c.idalert)
        )
        async with self.db.begin_nested():
            result = await self.db.execute(stmt)
            return len(result.all())
