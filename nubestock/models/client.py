"""
Client model.

Customers identified by RUC / cédula (``tb_mae_client``).
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from nubestock.models.base_model import AuditedModel


class Client(AuditedModel):
    """
    Client table.

    ``ruc_cedula`` is the natural key; bulk uploads also match existing
    clients by ``email`` when the RUC is unknown.
    """

    __tablename__ = "tb_mae_client"

    idclient: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    business_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    ruc_cedula: Mapped[str] = mapped_column(String(13), nullable=False, unique=True, index=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    idprovince: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    idcity: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    requires_credit: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    credit_limit: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    credit_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
