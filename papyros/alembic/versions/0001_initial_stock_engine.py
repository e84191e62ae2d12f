"""initial stock engine schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MOVEMENT_KIND = sa.Enum("entrada", "salida", "ajuste", name="movement_kind")
PO_STATUS = sa.Enum("emitida", "cerrada", "anulada", name="po_status")
PAYMENT_METHOD = sa.Enum("efectivo", "tarjeta", "transferencia", "otro", name="payment_method")

MONEY = sa.Numeric(14, 2)
PK = sa.BigInteger().with_variant(sa.Integer, "sqlite")


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("code", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("cost", MONEY, nullable=False),
        sa.Column("price", MONEY, nullable=False),
        sa.Column("stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("min_stock", sa.Integer, nullable=False, server_default="0"),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.CheckConstraint("stock >= 0", name="ck_product_stock_nonneg"),
        sa.CheckConstraint("min_stock >= 0", name="ck_product_min_stock_nonneg"),
        sa.CheckConstraint("cost >= 0", name="ck_product_cost_nonneg"),
        sa.CheckConstraint("price >= cost", name="ck_product_price_ge_cost"),
    )

    op.create_table(
        "suppliers",
        sa.Column("id", PK, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("tax_id", sa.String(32), nullable=False, unique=True),
        sa.Column("contact_name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", PK, primary_key=True),
        sa.Column("supplier_id", PK, sa.ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", PO_STATUS, nullable=False),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expected_at", sa.DateTime(timezone=True)),
        sa.Column("total", MONEY, nullable=False, server_default="0"),
        sa.Column("cancel_reason", sa.String(255)),
    )

    op.create_table(
        "purchase_order_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("po_id", PK, sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_code", sa.String(64), sa.ForeignKey("products.code", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_cost", MONEY, nullable=False),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_po_line_qty_pos"),
        sa.CheckConstraint("unit_cost >= 0", name="ck_po_line_unit_cost_nonneg"),
    )
    op.create_index("ix_purchase_order_lines_po_id", "purchase_order_lines", ["po_id"])

    op.create_table(
        "receptions",
        sa.Column("id", PK, primary_key=True),
        sa.Column(
            "purchase_order_id",
            PK,
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("invoice_ref", sa.String(64), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_receptions_purchase_order_id", "receptions", ["purchase_order_id"])

    op.create_table(
        "reception_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("reception_id", PK, sa.ForeignKey("receptions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_code", sa.String(64), sa.ForeignKey("products.code", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_reception_line_qty_pos"),
    )
    op.create_index("ix_reception_lines_reception_id", "reception_lines", ["reception_id"])

    op.create_table(
        "sales",
        sa.Column("id", PK, primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total", MONEY, nullable=False, server_default="0"),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("payment_method", PAYMENT_METHOD, nullable=False),
        sa.Column("cancellation_reason", sa.String(255)),
    )
    op.create_index("ix_sales_created_at", "sales", ["created_at"])

    op.create_table(
        "sale_lines",
        sa.Column("id", PK, primary_key=True),
        sa.Column("sale_id", PK, sa.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_code", sa.String(64), sa.ForeignKey("products.code", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("subtotal", MONEY, nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_sale_line_qty_pos"),
        sa.CheckConstraint("unit_price >= 0", name="ck_sale_line_unit_price_nonneg"),
    )
    op.create_index("ix_sale_lines_sale_id", "sale_lines", ["sale_id"])

    op.create_table(
        "stock_movements",
        sa.Column("id", PK, primary_key=True),
        sa.Column("product_code", sa.String(64), sa.ForeignKey("products.code", ondelete="RESTRICT"), nullable=False),
        sa.Column("kind", MOVEMENT_KIND, nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False),
        sa.Column("reason", sa.String(255), nullable=False),
        sa.Column("happened_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_stock_movement_qty_pos"),
    )
    op.create_index("ix_stock_movements_product_code", "stock_movements", ["product_code"])
    op.create_index("ix_stock_movements_product_time", "stock_movements", ["product_code", "happened_at"])


def downgrade() -> None:
    op.drop_index("ix_stock_movements_product_time", table_name="stock_movements")
    op.drop_index("ix_stock_movements_product_code", table_name="stock_movements")
    op.drop_table("stock_movements")
    op.drop_index("ix_sale_lines_sale_id", table_name="sale_lines")
    op.drop_table("sale_lines")
    op.drop_index("ix_sales_created_at", table_name="sales")
    op.drop_table("sales")
    op.drop_index("ix_reception_lines_reception_id", table_name="reception_lines")
    op.drop_table("reception_lines")
    op.drop_index("ix_receptions_purchase_order_id", table_name="receptions")
    op.drop_table("receptions")
    op.drop_index("ix_purchase_order_lines_po_id", table_name="purchase_order_lines")
    op.drop_table("purchase_order_lines")
    op.drop_table("purchase_orders")
    op.drop_table("suppliers")
    op.drop_table("products")

    bind = op.get_bind()
    PAYMENT_METHOD.drop(bind, checkfirst=True)
    PO_STATUS.drop(bind, checkfirst=True)
    MOVEMENT_KIND.drop(bind, checkfirst=True)
