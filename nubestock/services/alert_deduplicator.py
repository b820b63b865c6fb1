"""
Low-stock alert deduplication.

Creates at most one active alert per (entity, alert type). Alert creation
never fails the operation that triggered it: every error is logged and the
deduplicator reports zero alerts created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Set
from uuid import UUID

from nubestock.models.alert import AlertPriority, AlertStatus
from nubestock.utils.formatting import format_quantity

logger = logging.getLogger(__name__)

LOW_STOCK_ALERT_TYPE = "stock_low"
PRODUCT_ENTITY_TYPE = "product"


@dataclass(frozen=True)
class LowStockCandidate:
    entity_id: Optional[UUID]
    name: str
    code: str
    current: float
    threshold: float

    @classmethod
    def from_product_row(cls, row: Dict[str, Any]) -> Optional["LowStockCandidate"]:
        """Build a candidate from a product row, or None if stock is above minimum."""
        current = float(row.get("current_stock") or 0)
        threshold = float(row.get("minimum_stock") or 0)
        if current > threshold:
            return None
        return cls(
            entity_id=row.get("idfinal_product"),
            name=row.get("product_name") or "",
            code=row.get("sku") or "",
            current=current,
            threshold=threshold,
        )


class AlertStore(Protocol):
    async def active_alert_entity_ids(
        self,
        entity_type: str,
        alert_type: str,
        entity_ids: Sequence[UUID],
    ) -> Set[UUID]: ...

    async def insert_alerts(self, rows: List[Dict[str, Any]]) -> int: ...


class AlertDeduplicator:
    """Suppress alerts for entities that already have an active one, insert the rest."""

    def __init__(
        self,
        store: AlertStore,
        *,
        alert_type: str = LOW_STOCK_ALERT_TYPE,
        entity_type: str = PRODUCT_ENTITY_TYPE,
        priority: str = AlertPriority.HIGH,
    ):
        self.store = store
        self.alert_type = alert_type
        self.entity_type = entity_type
        self.priority = priority

    async def create_missing(self, candidates: Iterable[LowStockCandidate]) -> int:
        """Create alerts for candidates without an active one. Returns how many were created."""
        pending = self._unique_with_identity(candidates)
        if not pending:
            return 0

        try:
            active = await self.store.active_alert_entity_ids(
                self.entity_type,
                self.alert_type,
                [candidate.entity_id for candidate in pending],
            )
            rows = [self.build_alert(candidate) for candidate in pending if candidate.entity_id not in active]
            if not rows:
                logger.info("All %s low-stock %s(s) already have an active alert", len(pending), self.entity_type)
                return 0
            created = await self.store.insert_alerts(rows)
        except Exception:  # noqa: BLE001
            logger.warning(
                "Could not create %s alerts for %s %s(s)",
                self.alert_type,
                len(pending),
                self.entity_type,
                exc_info=True,
            )
            return 0

        logger.info("Created %s %s alert(s)", created, self.alert_type)
        return created

    def build_alert(self, candidate: LowStockCandidate) -> Dict[str, Any]:
        current = format_quantity(candidate.current)
        threshold = format_quantity(candidate.threshold)
        return {
            "alert_type": self.alert_type,
            "alert_title": f"Stock bajo: {candidate.name}",
            "alert_message": (
                f'El producto "{candidate.name}" (SKU: {candidate.code}) tiene stock bajo. '
                f"Stock actual: {current}, Mínimo requerido: {threshold}"
            ),
            "entity_type": self.entity_type,
            "entity_id": candidate.entity_id,
            "priority": self.priority,
            "status": AlertStatus.ACTIVE,
            "isactive": True,
        }

    @staticmethod
    def _unique_with_identity(candidates: Iterable[LowStockCandidate]) -> List[LowStockCandidate]:
        # Entities without an identity (not back-filled yet) cannot be alerted on.
        seen: Set[UUID] = set()
        unique: List[LowStockCandidate] = []
        for candidate in candidates:
            if candidate.entity_id is None or candidate.entity_id in seen:
                continue
            seen.add(candidate.entity_id)
            unique.append(candidate)
        return unique
