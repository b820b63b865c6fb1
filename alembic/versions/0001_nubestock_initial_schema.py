"""Nubestock initial schema

Revision ID: 0001_nubestock_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the nubestock schema with the product, material, client, alert and
stock-ledger tables. Alerts carry a partial unique index so an entity has
at most one active alert per alert type.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_nubestock_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = "nubestock"


def _audit_columns():
    return [
        sa.Column("isactive", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("creationdate", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("modificationdate", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create schema, tables and indexes."""
    op.execute(f"CREATE SCHEMA IF NOT EXISTS {SCHEMA}")

    op.create_table(
        "tb_mae_final_product",
        sa.Column("idfinal_product", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("product_name", sa.String(200), nullable=False),
        sa.Column("idcategory", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("idorigin", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("sku", sa.String(100), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("current_stock", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("minimum_stock", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *_audit_columns(),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_nubestock_tb_mae_final_product_sku",
        "tb_mae_final_product",
        ["sku"],
        unique=True,
        schema=SCHEMA,
    )

    op.create_table(
        "tb_mae_material",
        sa.Column("idmaterial", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("material_name", sa.String(200), nullable=False),
        sa.Column("material_code", sa.String(50), nullable=False),
        sa.Column("material_type", sa.String(20), nullable=False),
        sa.Column("unit_of_measure", sa.String(20), nullable=False),
        sa.Column("cost_per_unit", sa.Numeric(12, 4), nullable=False),
        sa.Column("minimum_stock", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("idorigin", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("supplier", sa.String(200), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint("material_type IN ('raw', 'packaging')", name="ck_material_type"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_nubestock_tb_mae_material_material_code",
        "tb_mae_material",
        ["material_code"],
        unique=True,
        schema=SCHEMA,
    )

    op.create_table(
        "tb_mae_client",
        sa.Column("idclient", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("business_name", sa.String(200), nullable=True),
        sa.Column("ruc_cedula", sa.String(13), nullable=False),
        sa.Column("email", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("idprovince", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("idcity", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("requires_credit", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("credit_limit", sa.Numeric(12, 2), nullable=True),
        sa.Column("credit_days", sa.Integer(), nullable=True),
        *_audit_columns(),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_nubestock_tb_mae_client_ruc_cedula",
        "tb_mae_client",
        ["ruc_cedula"],
        unique=True,
        schema=SCHEMA,
    )
    op.create_index("ix_nubestock_tb_mae_client_email", "tb_mae_client", ["email"], schema=SCHEMA)

    op.create_table(
        "tb_mae_alert",
        sa.Column("idalert", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("alert_type", sa.String(50), nullable=False),
        sa.Column("alert_title", sa.String(200), nullable=False),
        sa.Column("alert_message", sa.Text(), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_audit_columns(),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high', 'critical')", name="ck_alert_priority"),
        sa.CheckConstraint(
            "status IN ('active', 'acknowledged', 'resolved', 'dismissed')",
            name="ck_alert_status",
        ),
        schema=SCHEMA,
    )
    op.create_index("ix_alert_entity", "tb_mae_alert", ["entity_type", "entity_id"], schema=SCHEMA)
    op.execute(
        f"""
        CREATE UNIQUE INDEX uq_alert_active_entity_type
        ON {SCHEMA}.tb_mae_alert (entity_type, entity_id, alert_type)
        WHERE isactive
        """
    )

    op.create_table(
        "tb_ope_transaction",
        sa.Column("idtransaction", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("idfinal_product", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("transaction_type", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("reason", sa.String(200), nullable=True),
        sa.Column("iduser", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("creationdate", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_nubestock_tb_ope_transaction_idfinal_product",
        "tb_ope_transaction",
        ["idfinal_product"],
        schema=SCHEMA,
    )


def downgrade() -> None:
    """Drop every nubestock table (the schema itself is kept)."""
    op.drop_table("tb_ope_transaction", schema=SCHEMA)
    op.execute(f"DROP INDEX IF EXISTS {SCHEMA}.uq_alert_active_entity_type")
    op.drop_table("tb_mae_alert", schema=SCHEMA)
    op.drop_table("tb_mae_client", schema=SCHEMA)
    op.drop_table("tb_mae_material", schema=SCHEMA)
    op.drop_table("tb_mae_final_product", schema=SCHEMA)
