"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from nubestock.utils.formatting import utc_now_iso

T = TypeVar("T")


class AuditedRead(BaseModel):
    """
    Base schema for reading master-data rows.

    Includes the audit columns every ``tb_mae_*`` table carries.
    """

    isactive: bool
    creationdate: datetime
    modificationdate: Optional[datetime] = None

    # This tells Pydantic to work with SQLAlchemy models
    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    timestamp: str = Field(default_factory=utc_now_iso)


class PaginatedResponse(ApiResponse[List[T]], Generic[T]):
    """Envelope for paginated list endpoints."""

    pagination: Pagination
