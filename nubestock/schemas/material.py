"""
Material Pydantic schemas.
"""

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nubestock.schemas.base import AuditedRead


class MaterialCreate(BaseModel):
    material_name: str = Field(..., min_length=1, max_length=200)
    material_code: str = Field(..., min_length=1, max_length=50)
    material_type: Literal["raw", "packaging"]
    unit_of_measure: str = Field(..., min_length=1, max_length=20)
    cost_per_unit: float = Field(..., gt=0)
    minimum_stock: float = Field(default=0, ge=0)
    idorigin: UUID
    supplier: Optional[str] = Field(default=None, max_length=200)
    isactive: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")


class MaterialRead(AuditedRead):
    idmaterial: UUID
    material_name: str
    material_code: str
    material_type: str
    unit_of_measure: str
    cost_per_unit: float
    minimum_stock: float
    idorigin: UUID
    supplier: Optional[str] = None
