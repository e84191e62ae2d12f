"""
Movement ledger.

Append-only: this module exposes an insert and read queries, nothing that
updates or deletes a StockMovement. It never touches Product.stock; the
stock counter is owned by papyros.services.inventory.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from papyros.app.core.errors import InvalidQuantity, ValidationError
from papyros.app.db.models.core_types import MovementKind
from papyros.app.db.models.models_v1 import MOVEMENT_REASON_MAX, StockMovement, utcnow


def append(
    db: Session,
    *,
    product_code: str,
    kind: MovementKind,
    quantity: int,
    reason: str,
    happened_at: datetime | None = None,
) -> StockMovement:
    if quantity <= 0:
        raise InvalidQuantity(quantity, product_code)

    if len(reason) > MOVEMENT_REASON_MAX:
        raise ValidationError(
            f"Movement reason is longer than {MOVEMENT_REASON_MAX} characters",
            product_code=product_code,
        )

    mv = StockMovement(
        product_code=product_code,
        kind=kind,
        quantity=quantity,
        reason=reason,
        happened_at=happened_at or utcnow(),
    )
    db.add(mv)
    return mv


def history(
    db: Session,
    *,
    product_code: str | None = None,
    kind: MovementKind | None = None,
    limit: int | None = None,
) -> list[StockMovement]:
    stmt = select(StockMovement).order_by(StockMovement.happened_at.desc(), StockMovement.id.desc())

    if product_code is not None:
        stmt = stmt.where(StockMovement.product_code == product_code)

    if kind is not None:
        stmt = stmt.where(StockMovement.kind == kind)

    if limit is not None:
        stmt = stmt.limit(limit)

    return list(db.execute(stmt).scalars().all())


def net_quantity(db: Session, product_code: str) -> int:
    """
    Signed sum of committed movements: ENTRADA counts up, SALIDA down.

    AJUSTE entries carry no direction and are left out; the engine records
    manual adjustments as ENTRADA or SALIDA.
    """
    signed = case(
        (StockMovement.kind == MovementKind.entrada, StockMovement.quantity),
        (StockMovement.kind == MovementKind.salida, -StockMovement.quantity),
        else_=0,
    )
    total = db.execute(
        select(func.coalesce(func.sum(signed), 0)).where(StockMovement.product_code == product_code)
    ).scalar_one()
    return int(total)
