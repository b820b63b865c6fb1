"""
Products router - API endpoints for final products, stock and bulk upload.
"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.dependencies import get_db, get_product_bulk_service, get_product_service
from nubestock.schemas.base import ApiResponse, PaginatedResponse, Pagination
from nubestock.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
    StockCheckResult,
    StockOperationRequest,
    StockOperationResult,
)
from nubestock.services.bulk_response import build_bulk_response, bulk_response_content
from nubestock.services.bulk_upload_service import BulkUploadService
from nubestock.services.product_service import ProductService
from nubestock.utils.formatting import total_pages

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=PaginatedResponse[ProductRead])
async def list_products(
    service: ProductService = Depends(get_product_service),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    idcategory: Optional[UUID] = None,
    idorigin: Optional[UUID] = None,
):
    """
    List active products with pagination.

    Search matches product name, SKU and description.
    """
    products, total = await service.list_products(
        page=page,
        limit=limit,
        search=search,
        idcategory=idcategory,
        idorigin=idorigin,
    )
    return PaginatedResponse[ProductRead](
        data=[ProductRead.model_validate(product) for product in products],
        pagination=Pagination(page=page, limit=limit, total=total, totalPages=total_pages(total, limit)),
    )


@router.post("/bulk")
async def bulk_upload_products(
    body: Any = Body(...),
    db: AsyncSession = Depends(get_db),
    service: BulkUploadService = Depends(get_product_bulk_service),
):
    """
    Create or update many products keyed by SKU.

    Answers 201 when every record was written, 207 on partial success and
    400 when nothing was written.
    """
    result = await service.upload(body)
    await db.commit()
    status_code, response = build_bulk_response(result, "product")
    return JSONResponse(status_code=status_code, content=bulk_response_content(response))


@router.post("/check-stock", response_model=ApiResponse[StockCheckResult])
async def check_stock(
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    """Raise low-stock alerts for every product at or below its minimum."""
    result = await service.check_stock()
    await db.commit()
    return ApiResponse[StockCheckResult](
        message=f"{result.lowStockProducts} low-stock product(s), {result.alertsGenerated} alert(s) generated",
        data=result,
    )


@router.post("/stock-operation", response_model=ApiResponse[StockOperationResult])
async def stock_operation(
    request: StockOperationRequest,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    """Register a stock-in or stock-out movement for a product."""
    result = await service.stock_operation(request)
    await db.commit()
    return ApiResponse[StockOperationResult](message="Stock updated successfully", data=result)


@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
async def get_product(product_id: UUID, service: ProductService = Depends(get_product_service)):
    """Get an active product by ID."""
    product = await service.get_product(product_id)
    return ApiResponse[ProductRead](data=ProductRead.model_validate(product))


@router.post("", response_model=ApiResponse[ProductRead], status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    """Create a new product."""
    product = await service.create_product(data)
    await db.commit()
    return ApiResponse[ProductRead](message="Product created successfully", data=ProductRead.model_validate(product))


@router.put("/{product_id}", response_model=ApiResponse[ProductRead])
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    """Update a product. Raises a low-stock alert when the new stock calls for one."""
    product = await service.update_product(product_id, data)
    await db.commit()
    return ApiResponse[ProductRead](message="Product updated successfully", data=ProductRead.model_validate(product))


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db),
    service: ProductService = Depends(get_product_service),
):
    """Deactivate a product (soft delete)."""
    await service.delete_product(product_id)
    await db.commit()
    return ApiResponse[None](message="Product deleted successfully")
