"""
Pydantic schemas for alerts.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from nubestock.schemas.base import AuditedRead


class AlertUpdate(BaseModel):
    """Status / priority change for an alert."""

    status: Optional[Literal["active", "acknowledged", "resolved", "dismissed"]] = None
    priority: Optional[Literal["low", "medium", "high", "critical"]] = None
    resolved_by: Optional[UUID] = None

    # Lifecycle shortcuts accepted on PUT /alerts/{id}
    acknowledge: Optional[bool] = None
    resolve: Optional[bool] = None
    dismiss: Optional[bool] = None


class AlertResolve(BaseModel):
    resolved_by: Optional[UUID] = None


class AlertRead(AuditedRead):
    """Read model for alerts."""

    idalert: UUID
    alert_type: str
    alert_title: str
    alert_message: str
    entity_type: str
    entity_id: UUID
    priority: str
    status: str
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[UUID] = None
