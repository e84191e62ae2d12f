from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import (
    String,
    Integer,
    BigInteger,
    DateTime,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from papyros.app.core.errors import InvalidStateTransition
from papyros.app.db.base import Base
from papyros.app.db.models.core_types import (
    MovementKind,
    POStatus,
    PaymentMethod,
    SALE_STATUS_CONFIRMED,
)

# SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

CENT = Decimal("0.01")
MOVEMENT_REASON_MAX = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def money(value) -> Decimal:
    """Currency amount rounded to cents, half-up. Floats go through str()."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# ---------- CATALOG ----------
class Product(Base):
    __tablename__ = "products"
    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Optimistic concurrency: every UPDATE checks and bumps this counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_stock_nonneg"),
        CheckConstraint("min_stock >= 0", name="ck_product_min_stock_nonneg"),
        CheckConstraint("cost >= 0", name="ck_product_cost_nonneg"),
        CheckConstraint("price >= cost", name="ck_product_price_ge_cost"),
    )


class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    tax_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    contact_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    purchase_orders: Mapped[list["PurchaseOrder"]] = relationship(back_populates="supplier")


# ---------- PROCUREMENT / INBOUND ----------
class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    supplier_id: Mapped[int] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[POStatus] = mapped_column(Enum(POStatus, name="po_status"), default=POStatus.emitida, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    expected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    cancel_reason: Mapped[str | None] = mapped_column(String(255))

    supplier: Mapped[Supplier] = relationship(back_populates="purchase_orders")
    lines: Mapped[list["PurchaseOrderLine"]] = relationship(
        back_populates="po",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderLine.id",
    )

    def emit(self) -> None:
        if self.status != POStatus.emitida:
            raise InvalidStateTransition("Purchase order is not in EMITIDA state")
        self.recalculate_total()

    def close_if_complete(self) -> None:
        if not self.lines:
            raise InvalidStateTransition("Cannot close a purchase order without lines")
        if not all(ln.quantity > 0 for ln in self.lines):
            raise InvalidStateTransition("Purchase order is not complete")
        self.status = POStatus.cerrada

    def cancel(self, reason: str) -> None:
        if self.status == POStatus.cerrada:
            raise InvalidStateTransition("Cannot cancel a closed purchase order")
        self.status = POStatus.anulada
        self.cancel_reason = reason

    def recalculate_total(self) -> None:
        self.total = sum((ln.subtotal for ln in self.lines), Decimal("0.00"))


class PurchaseOrderLine(Base):
    __tablename__ = "purchase_order_lines"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    po_id: Mapped[int] = mapped_column(ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_code: Mapped[str] = mapped_column(ForeignKey("products.code", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    po: Mapped[PurchaseOrder] = relationship(back_populates="lines")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_po_line_qty_pos"),
        CheckConstraint("unit_cost >= 0", name="ck_po_line_unit_cost_nonneg"),
    )


class Reception(Base):
    __tablename__ = "receptions"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    purchase_order_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    invoice_ref: Mapped[str] = mapped_column(String(64), nullable=False)
    received_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    purchase_order: Mapped[PurchaseOrder] = relationship()
    lines: Mapped[list["ReceptionLine"]] = relationship(
        back_populates="reception",
        cascade="all, delete-orphan",
        order_by="ReceptionLine.id",
    )


class ReceptionLine(Base):
    __tablename__ = "reception_lines"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    reception_id: Mapped[int] = mapped_column(ForeignKey("receptions.id", ondelete="CASCADE"), nullable=False, index=True)
    product_code: Mapped[str] = mapped_column(ForeignKey("products.code", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    reception: Mapped[Reception] = relationship(back_populates="lines")
    product: Mapped[Product] = relationship()

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_reception_line_qty_pos"),)


# ---------- SALES / OUTBOUND ----------
class Sale(Base):
    __tablename__ = "sales"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=SALE_STATUS_CONFIRMED, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod, name="payment_method"), nullable=False)
    cancellation_reason: Mapped[str | None] = mapped_column(String(255))

    lines: Mapped[list["SaleLine"]] = relationship(
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleLine.id",
    )

    __table_args__ = (Index("ix_sales_created_at", "created_at"),)


class SaleLine(Base):
    __tablename__ = "sale_lines"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    sale_id: Mapped[int] = mapped_column(ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_code: Mapped[str] = mapped_column(ForeignKey("products.code", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    sale: Mapped[Sale] = relationship(back_populates="lines")
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_line_qty_pos"),
        CheckConstraint("unit_price >= 0", name="ck_sale_line_unit_price_nonneg"),
    )


# ---------- INVENTORY LEDGER ----------
class StockMovement(Base):
    __tablename__ = "stock_movements"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    product_code: Mapped[str] = mapped_column(
        ForeignKey("products.code", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    kind: Mapped[MovementKind] = mapped_column(Enum(MovementKind, name="movement_kind"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(MOVEMENT_REASON_MAX), nullable=False)
    happened_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    product: Mapped[Product] = relationship()

    @property
    def signed_quantity(self) -> int:
        if self.kind == MovementKind.salida:
            return -self.quantity
        if self.kind == MovementKind.entrada:
            return self.quantity
        return 0

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movement_qty_pos"),
        Index("ix_stock_movements_product_time", "product_code", "happened_at"),
    )
