"""
Product Pydantic schemas.
"""

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nubestock.schemas.base import AuditedRead


class ProductCreate(BaseModel):
    """Schema for creating a product (also one record of a bulk upload)."""

    product_name: str = Field(..., min_length=2, max_length=200)
    idcategory: Optional[UUID] = None
    idorigin: UUID
    description: Optional[str] = Field(default=None, max_length=500)
    sku: str = Field(..., min_length=2, max_length=100)
    unit_price: float = Field(..., gt=0)
    current_stock: float = Field(default=0, ge=0)
    minimum_stock: float = Field(default=0, ge=0)
    isactive: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")


class ProductUpdate(BaseModel):
    """Schema for updating a product. All fields optional."""

    product_name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    idcategory: Optional[UUID] = None
    idorigin: Optional[UUID] = None
    description: Optional[str] = Field(default=None, max_length=500)
    sku: Optional[str] = Field(default=None, min_length=2, max_length=100)
    unit_price: Optional[float] = Field(default=None, gt=0)
    current_stock: Optional[float] = Field(default=None, ge=0)
    minimum_stock: Optional[float] = Field(default=None, ge=0)


class ProductRead(AuditedRead):
    """Schema for reading product data (API response)."""

    idfinal_product: UUID
    product_name: str
    idcategory: Optional[UUID] = None
    idorigin: UUID
    description: Optional[str] = None
    sku: str
    unit_price: float
    current_stock: float
    minimum_stock: float


class StockOperationRequest(BaseModel):
    idfinal_product: UUID
    operation_type: Literal["in", "out"]
    quantity: float = Field(..., gt=0)
    reason: Optional[str] = Field(default=None, max_length=200)
    user_id: Optional[UUID] = None


class StockOperationResult(BaseModel):
    id: UUID
    name: str
    sku: str
    previousStock: float
    newStock: float
    operation: str
    quantity: float


class LowStockProduct(BaseModel):
    id: UUID
    name: str
    sku: str
    currentStock: float
    minimumStock: float


class StockCheckResult(BaseModel):
    lowStockProducts: int
    alertsGenerated: int
    products: List[LowStockProduct]
