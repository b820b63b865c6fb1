"""
Material model.

Raw materials and packaging consumed by production (``tb_mae_material``).
"""

import uuid
from typing import Optional

from sqlalchemy import Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.models.base_model import AuditedModel


class Material(AuditedModel):
    """Material table. ``material_code`` is the bulk-upload natural key."""

    __tablename__ = "tb_mae_material"

    idmaterial: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    material_name: Mapped[str] = mapped_column(String(200), nullable=False)
    material_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    material_type: Mapped[str] = mapped_column(String(20), nullable=False)  # raw | packaging
    unit_of_measure: Mapped[str] = mapped_column(String(20), nullable=False)
    cost_per_unit: Mapped[float] = mapped_column(Numeric(12, 4, asdecimal=False), nullable=False)
    minimum_stock: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False),
        nullable=False,
        default=0,
        server_default="0",
    )
    idorigin: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    supplier: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
