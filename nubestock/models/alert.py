"""
Alert model.

Open conditions (e.g. low stock) raised against an entity. At most one
*active* alert exists per (entity_type, entity_id, alert_type); the
partial unique index below enforces it at the database level.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.models.base_model import AuditedModel


class AlertStatus:
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    ALL = [ACTIVE, ACKNOWLEDGED, RESOLVED, DISMISSED]
    # Statuses that close the alert and free the (entity, type) slot
    CLOSED = [RESOLVED, DISMISSED]


class AlertPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    ALL = [LOW, MEDIUM, HIGH, CRITICAL]


class Alert(AuditedModel):
    """Alert table (``tb_mae_alert``)."""

    __tablename__ = "tb_mae_alert"

    idalert: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    alert_title: Mapped[str] = mapped_column(String(200), nullable=False)
    alert_message: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=AlertPriority.MEDIUM)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AlertStatus.ACTIVE,
        server_default=AlertStatus.ACTIVE,
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_alert_active_entity_type",
            "entity_type",
            "entity_id",
            "alert_type",
            unique=True,
            postgresql_where=text("isactive"),
        ),
        Index("ix_alert_entity", "entity_type", "entity_id"),
    )
