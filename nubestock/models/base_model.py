"""
Shared columns for master-data tables.

Every ``tb_mae_*`` table carries an active flag plus creation and
modification timestamps. Primary keys keep their per-table names
(``idfinal_product``, ``idclient``...), so each model declares its own.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.db.base import Base


class AuditedModel(Base):
    """Abstract base adding isactive / creationdate / modificationdate."""

    __abstract__ = True

    isactive: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )

    creationdate: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    modificationdate: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
