"""
Product catalog.

Registration, edition and soft (de)activation of products. Nothing here
writes Product.stock: a new product starts at 0 and every later change goes
through papyros.services.inventory.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from papyros.app.core.errors import DuplicateCode, InvalidPrice, ProductNotFound, ValidationError
from papyros.app.db.models.models_v1 import Product, money
from papyros.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _check_min_stock(min_stock: int) -> None:
    if min_stock < 0:
        raise ValidationError("Minimum stock cannot be negative", min_stock=min_stock)


def _check_prices(cost: Decimal, price: Decimal) -> None:
    if cost < 0:
        raise InvalidPrice("Cost cannot be negative", cost=str(cost))
    if price < 0:
        raise InvalidPrice("Price cannot be negative", price=str(price))
    if price < cost:
        raise InvalidPrice("Price cannot be lower than cost", cost=str(cost), price=str(price))


def get_product(db: Session, code: str, *, lock: bool = False) -> Product:
    if lock:
        product = (
            db.execute(
                select(Product)
                .where(Product.code == code)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            .scalars()
            .first()
        )
    else:
        product = db.get(Product, code)

    if product is None:
        raise ProductNotFound(code)
    return product


def find_by_codes(
    db: Session,
    codes: Iterable[str],
    *,
    active_only: bool = True,
    lock: bool = False,
) -> dict[str, Product]:
    """
    Batch lookup keyed by code, one query for the whole line set.

    With ``lock=True`` the rows are read FOR UPDATE in code order (stable lock
    ordering between concurrent operations) and identity-map instances are
    refreshed so the caller validates against the current stock.
    """
    codes = sorted({c for c in codes if c is not None})
    if not codes:
        return {}

    stmt = select(Product).where(Product.code.in_(codes))
    if active_only:
        stmt = stmt.where(Product.active.is_(True))
    if lock:
        stmt = stmt.order_by(Product.code).with_for_update().execution_options(populate_existing=True)

    rows = db.execute(stmt).scalars().all()
    return {p.code: p for p in rows}


def create_product(
    db: Session,
    *,
    code: str,
    name: str,
    category: str,
    cost,
    price,
    min_stock: int = 0,
) -> Product:
    cost = money(cost)
    price = money(price)
    _check_prices(cost, price)
    _check_min_stock(min_stock)

    with UnitOfWork(db):
        if db.get(Product, code) is not None:
            raise DuplicateCode(code)

        p = Product(
            code=code,
            name=name,
            category=category,
            cost=cost,
            price=price,
            stock=0,
            min_stock=min_stock,
            active=True,
        )
        db.add(p)

        # Concurrent registration of the same code: the primary key decides
        try:
            db.flush()
        except IntegrityError as exc:
            raise DuplicateCode(code) from exc

    logger.info("Product %s registered (%s)", code, name)
    return p


def update_product(
    db: Session,
    code: str,
    *,
    name: str,
    category: str,
    cost,
    price,
    min_stock: int,
) -> Product:
    cost = money(cost)
    price = money(price)

    with UnitOfWork(db):
        p = get_product(db, code)
        _check_prices(cost, price)
        _check_min_stock(min_stock)

        p.name = name
        p.category = category
        p.cost = cost
        p.price = price
        p.min_stock = min_stock

    return p


def set_active(db: Session, code: str, active: bool) -> Product:
    with UnitOfWork(db):
        p = get_product(db, code)
        p.active = active

    logger.info("Product %s %s", code, "reactivated" if active else "deactivated")
    return p


def deactivate_product(db: Session, code: str) -> Product:
    return set_active(db, code, False)


def reactivate_product(db: Session, code: str) -> Product:
    return set_active(db, code, True)


def search_products(
    db: Session,
    q: str | None = None,
    *,
    low_stock: bool = False,
    limit: int | None = None,
) -> list[Product]:
    stmt = select(Product).where(Product.active.is_(True))

    if q and q.strip():
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                Product.code.ilike(pattern),
                Product.name.ilike(pattern),
                Product.category.ilike(pattern),
            )
        )

    if low_stock:
        stmt = stmt.where(Product.stock <= Product.min_stock)

    stmt = stmt.order_by(Product.name, Product.code)
    if limit is not None:
        stmt = stmt.limit(limit)

    return list(db.execute(stmt).scalars().all())
