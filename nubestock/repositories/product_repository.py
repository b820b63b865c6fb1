"""
Product repository - database operations for Product and its stock ledger.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nubestock.models.product import Product
from nubestock.models.stock_movement import StockMovement
from nubestock.utils.formatting import utc_now


class ProductRepository:
    """Repository for Product database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        limit: int = 10,
        offset: int = 0,
        search: Optional[str] = None,
        idcategory: Optional[UUID] = None,
        idorigin: Optional[UUID] = None,
    ) -> Tuple[List[Product], int]:
        """List active products with filters. Returns the page and the total count."""
        query = select(Product).where(Product.isactive.is_(True))

        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Product.product_name.ilike(pattern),
                    Product.sku.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )
        if idcategory is not None:
            query = query.where(Product.idcategory == idcategory)
        if idorigin is not None:
            query = query.where(Product.idorigin == idorigin)

        total = await self.db.scalar(select(func.count()).select_from(query.subquery()))

        query = query.order_by(Product.creationdate.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all()), int(total or 0)

    async def get_by_id(self, product_id: UUID, *, active_only: bool = True) -> Optional[Product]:
        query = select(Product).where(Product.idfinal_product == product_id)
        if active_only:
            query = query.where(Product.isactive.is_(True))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_for_update(self, product_id: UUID) -> Optional[Product]:
        """Load an active product and lock its row until the transaction ends."""
        result = await self.db.execute(
            select(Product)
            .where(Product.idfinal_product == product_id, Product.isactive.is_(True))
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def get_by_sku(self, sku: str) -> Optional[Product]:
        result = await self.db.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def create(self, data: Dict[str, Any]) -> Product:
        product = Product(**data)
        self.db.add(product)
        await self.db.flush()
        await self.db.refresh(product)
        return product

    async def update(self, product: Product, data: Dict[str, Any]) -> Product:
        for field, value in data.items():
            setattr(product, field, value)
        product.modificationdate = utc_now()
        await self.db.flush()
        await self.db.refresh(product)
        return product

    async def soft_delete(self, product: Product) -> Product:
        product.isactive = False
        product.modificationdate = utc_now()
        await self.db.flush()
        return product

    async def list_low_stock(self) -> List[Product]:
        """Active products at or below their minimum stock."""
        result = await self.db.execute(
            select(Product)
            .where(
                Product.isactive.is_(True),
                Product.current_stock <= Product.minimum_stock,
            )
            .order_by(Product.product_name.asc())
        )
        return list(result.scalars().all())

    async def add_movement(
        self,
        product: Product,
        transaction_type: str,
        quantity: float,
        reason: Optional[str] = None,
        user_id: Optional[UUID] = None,
    ) -> StockMovement:
        unit_price = float(product.unit_price or 0)
        movement = StockMovement(
            idfinal_product=product.idfinal_product,
            transaction_type=transaction_type,
            quantity=quantity,
            unit_price=unit_price,
            total_amount=round(unit_price * quantity, 2),
            reason=reason,
            iduser=user_id,
        )
        self.db.add(movement)
        await self.db.flush()
        return movement
