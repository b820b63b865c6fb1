"""
Product business logic service.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.core.config import settings
from nubestock.errors import AppError, ConflictError, NotFoundError
from nubestock.models.product import Product
from nubestock.repositories.alert_repository import AlertRepository
from nubestock.repositories.product_repository import ProductRepository
from nubestock.schemas.product import (
    LowStockProduct,
    ProductCreate,
    ProductUpdate,
    StockCheckResult,
    StockOperationRequest,
    StockOperationResult,
)
from nubestock.services.alert_deduplicator import AlertDeduplicator, LowStockCandidate
from nubestock.utils.formatting import format_quantity

logger = logging.getLogger(__name__)

DUPLICATE_SKU_MESSAGE = "A product with this SKU already exists"
NULLABLE_FIELDS = {"idcategory", "description"}


def product_row(product: Product) -> Dict[str, Any]:
    return {column.key: getattr(product, column.key) for column in Product.__table__.columns}


class ProductService:
    """Service for product business logic."""

    def __init__(self, db: AsyncSession, alerts: Optional[AlertDeduplicator] = None):
        self.repository = ProductRepository(db)
        self.alerts = alerts or AlertDeduplicator(
            AlertRepository(db),
            priority=settings.LOW_STOCK_ALERT_PRIORITY,
        )

    async def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        idcategory: Optional[UUID] = None,
        idorigin: Optional[UUID] = None,
    ) -> Tuple[List[Product], int]:
        """List active products, one page at a time."""
        return await self.repository.list(
            limit=limit,
            offset=(page - 1) * limit,
            search=search,
            idcategory=idcategory,
            idorigin=idorigin,
        )

    async def get_product(self, product_id: UUID) -> Product:
        product = await self.repository.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def create_product(self, data: ProductCreate) -> Product:
        """Create a new product. SKUs are unique across active and inactive rows."""
        if await self.repository.get_by_sku(data.sku):
            raise ConflictError(DUPLICATE_SKU_MESSAGE)

        values = data.model_dump()
        if values.get("isactive") is None:
            values["isactive"] = True
        try:
            product = await self.repository.create(values)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_SKU_MESSAGE) from exc

        logger.info("Product created: %s (%s)", product.sku, product.idfinal_product)
        return product

    async def update_product(self, product_id: UUID, data: ProductUpdate) -> Product:
        """Update a product, then raise a low-stock alert if it now needs one."""
        product = await self.get_product(product_id)

        values = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        new_sku = values.get("sku")
        if new_sku and new_sku != product.sku:
            existing = await self.repository.get_by_sku(new_sku)
            if existing and existing.idfinal_product != product.idfinal_product:
                raise ConflictError(DUPLICATE_SKU_MESSAGE)

        try:
            product = await self.repository.update(product, values)
        except IntegrityError as exc:
            raise ConflictError(DUPLICATE_SKU_MESSAGE) from exc

        await self._alert_if_low(product)
        return product

    async def delete_product(self, product_id: UUID) -> None:
        """Soft delete: the row stays, flagged inactive."""
        product = await self.get_product(product_id)
        await self.repository.soft_delete(product)
        logger.info("Product deactivated: %s", product.sku)

    async def check_stock(self) -> StockCheckResult:
        """Scan every active low-stock product and alert on those without an open alert."""
        products = await self.repository.list_low_stock()
        candidates = [LowStockCandidate.from_product_row(product_row(product)) for product in products]
        created = await self.alerts.create_missing([c for c in candidates if c is not None])

        return StockCheckResult(
            lowStockProducts=len(products),
            alertsGenerated=created,
            products=[
                LowStockProduct(
                    id=product.idfinal_product,
                    name=product.product_name,
                    sku=product.sku,
                    currentStock=product.current_stock,
                    minimumStock=product.minimum_stock,
                )
                for product in products
            ],
        )

    async def stock_operation(self, request: StockOperationRequest) -> StockOperationResult:
        """
        Apply a manual stock movement.

        The product row is locked, the ledger row and the new stock level
        are written in the same transaction.
        """
        product = await self.repository.get_for_update(request.idfinal_product)
        if not product:
            raise NotFoundError("Product not found")

        previous = float(product.current_stock or 0)
        if request.operation_type == "in":
            new_stock = previous + request.quantity
        else:
            new_stock = previous - request.quantity
            if new_stock < 0:
                raise AppError(
                    400,
                    "Insufficient stock",
                    errors=[
                        {
                            "field": "quantity",
                            "message": (
                                f"Available: {format_quantity(previous)}, "
                                f"requested: {format_quantity(request.quantity)}"
                            ),
                        }
                    ],
                )

        await self.repository.add_movement(
            product,
            transaction_type=f"stock_{request.operation_type}",
            quantity=request.quantity,
            reason=request.reason,
            user_id=request.user_id,
        )
        product = await self.repository.update(product, {"current_stock": new_stock})
        logger.info(
            "Stock %s on %s: %s -> %s",
            request.operation_type,
            product.sku,
            format_quantity(previous),
            format_quantity(new_stock),
        )

        await self._alert_if_low(product)

        return StockOperationResult(
            id=product.idfinal_product,
            name=product.product_name,
            sku=product.sku,
            previousStock=previous,
            newStock=new_stock,
            operation=request.operation_type,
            quantity=request.quantity,
        )

    async def _alert_if_low(self, product: Product) -> int:
        candidate = LowStockCandidate.from_product_row(product_row(product))
        if candidate is None:
            return 0
        return await self.alerts.create_missing([candidate])
