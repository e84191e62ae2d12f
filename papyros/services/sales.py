"""
Sale processor.

Two phases inside one UnitOfWork:

1. validate: batch-load the active products (row-locked), check every line
   (existence, quantity, stock sufficiency) before anything is written
2. commit: create the Sale and its lines, decrement stock through the
   stock mutator (one SALIDA entry per line), compute the total

A failure on any line leaves every product and the ledger untouched.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from papyros.app.core.config import settings
from papyros.app.core.errors import (
    EmptyOrderError,
    InsufficientStock,
    InvalidPrice,
    InvalidQuantity,
    ProductNotFoundOrInactive,
    SaleNotFound,
)
from papyros.app.db.models.core_types import MovementKind, PaymentMethod, SALE_STATUS_CONFIRMED
from papyros.app.db.models.models_v1 import Product, Sale, SaleLine, money
from papyros.services import catalog
from papyros.services.inventory import apply_delta
from papyros.services.unit_of_work import UnitOfWork, run_in_unit_of_work

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleLineInput:
    product_code: str
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class PosLineCheck:
    product_code: str
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    remaining_stock: int


def sale_reason(sale_id: int) -> str:
    return f"VENTA #{sale_id}"


def _validate_lines(lines: list[SaleLineInput], products: dict[str, Product]) -> None:
    # Repeated codes are checked against their cumulative quantity
    requested: dict[str, int] = {}

    for ln in lines:
        product = products.get(ln.product_code)
        if product is None:
            raise ProductNotFoundOrInactive(ln.product_code)

        if ln.quantity <= 0:
            raise InvalidQuantity(ln.quantity, ln.product_code)

        if ln.unit_price < 0:
            raise InvalidPrice("Unit price cannot be negative", product_code=ln.product_code)

        requested[ln.product_code] = requested.get(ln.product_code, 0) + ln.quantity
        if product.stock < requested[ln.product_code]:
            raise InsufficientStock(product.code, product.stock, requested[ln.product_code])


def register_sale(
    db: Session,
    lines: Iterable[SaleLineInput],
    payment_method: PaymentMethod,
    *,
    cancel_event: threading.Event | None = None,
) -> Sale:
    lines = [
        SaleLineInput(ln.product_code, int(ln.quantity), money(ln.unit_price))
        for ln in lines
    ]
    if not lines:
        raise EmptyOrderError("A sale must have at least one line")

    payment_method = PaymentMethod(payment_method)

    def work(uow: UnitOfWork) -> Sale:
        products = catalog.find_by_codes(db, (ln.product_code for ln in lines), lock=True)
        _validate_lines(lines, products)

        sale = Sale(
            payment_method=payment_method,
            status=SALE_STATUS_CONFIRMED,
            total=Decimal("0.00"),
        )
        db.add(sale)
        db.flush()  # sale.id is part of the ledger reason

        reason = sale_reason(sale.id)
        for ln in lines:
            product = products[ln.product_code]
            sale.lines.append(
                SaleLine(
                    product_code=product.code,
                    quantity=ln.quantity,
                    unit_price=ln.unit_price,
                    subtotal=money(ln.unit_price * ln.quantity),
                )
            )
            apply_delta(db, product, -ln.quantity, MovementKind.salida, reason)
            uow.check_cancelled()

        sale.total = sum((sl.subtotal for sl in sale.lines), Decimal("0.00"))
        return sale

    sale = run_in_unit_of_work(db, work, name="register_sale", cancel_event=cancel_event)
    logger.info("Sale #%s registered: %d line(s), total=%s", sale.id, len(lines), sale.total)
    return sale


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = (
        db.execute(select(Sale).where(Sale.id == sale_id).options(selectinload(Sale.lines)))
        .scalars()
        .first()
    )
    if sale is None:
        raise SaleNotFound(sale_id)
    return sale


# ---------- POINT OF SALE ----------
def search_pos_products(db: Session, q: str | None, *, limit: int | None = None) -> list[Product]:
    """Active products whose code or name contains q, for the sale screen."""
    if not q or not q.strip():
        return []

    pattern = f"%{q.strip()}%"
    stmt = (
        select(Product)
        .where(Product.active.is_(True))
        .where(Product.code.ilike(pattern) | Product.name.ilike(pattern))
        .order_by(Product.name, Product.code)
        .limit(limit or settings.POS_SEARCH_LIMIT)
    )
    return list(db.execute(stmt).scalars().all())


def validate_pos_line(db: Session, product_code: str, quantity: int) -> PosLineCheck:
    """Check a line before it is added to a ticket. Nothing is written."""
    if quantity <= 0:
        raise InvalidQuantity(quantity, product_code)

    product = catalog.find_by_codes(db, [product_code]).get(product_code)
    if product is None:
        raise ProductNotFoundOrInactive(product_code)

    if product.stock < quantity:
        raise InsufficientStock(product.code, product.stock, quantity)

    return PosLineCheck(
        product_code=product.code,
        product_name=product.name,
        quantity=quantity,
        unit_price=product.price,
        subtotal=money(product.price * quantity),
        remaining_stock=product.stock - quantity,
    )
