"""
Product model.

Represents a finished product (``tb_mae_final_product``) with its stock
level and the minimum below which a low-stock alert is raised.
"""

import uuid
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.models.base_model import AuditedModel


class Product(AuditedModel):
    """
    Final product table.

    ``sku`` is the natural key used by bulk uploads.
    """

    __tablename__ = "tb_mae_final_product"

    idfinal_product: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    product_name: Mapped[str] = mapped_column(String(200), nullable=False)

    idcategory: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    idorigin: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    unit_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)

    current_stock: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False),
        nullable=False,
        default=0,
        server_default="0",
    )

    minimum_stock: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False),
        nullable=False,
        default=0,
        server_default="0",
    )

    @property
    def is_low_stock(self) -> bool:
        return float(self.current_stock or 0) <= float(self.minimum_stock or 0)
