"""
StockMovement model.

Ledger row written for every manual stock-in / stock-out operation
(``tb_ope_transaction``).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.db.base import Base


class StockMovement(Base):
    __tablename__ = "tb_ope_transaction"

    idtransaction: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    idfinal_product: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    transaction_type: Mapped[str] = mapped_column(String(20), nullable=False)  # stock_in | stock_out
    quantity: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    unit_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    total_amount: Mapped[float] = mapped_column(Numeric(14, 2, asdecimal=False), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    iduser: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    creationdate: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
