"""
Stock mutator.

apply_delta() is the only code path that writes Product.stock. It always
pairs the new counter value with exactly one ledger entry, inside the
caller's UnitOfWork, so both land (or vanish) together with the rest of
the business operation.

Business rule:
    stock_after = stock_before + delta
    stock_after >= 0, checked before any write
    ledger quantity = abs(delta), sign carried by the movement kind
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from sqlalchemy.orm import Session

from papyros.app.core.errors import NegativeStockError, ValidationError, ZeroAdjustmentError
from papyros.app.db.models.core_types import MovementKind
from papyros.app.db.models.models_v1 import MOVEMENT_REASON_MAX, Product
from papyros.services import catalog, ledger
from papyros.services.unit_of_work import UnitOfWork, run_in_unit_of_work

logger = logging.getLogger(__name__)

ADJUSTMENT_REASON_PREFIX = "AJUSTE: "
ADJUSTMENT_REASON_MAX = MOVEMENT_REASON_MAX - len(ADJUSTMENT_REASON_PREFIX)


def apply_delta(
    db: Session,
    product: Product,
    delta: int,
    kind: MovementKind,
    reason: str,
    *,
    happened_at: datetime | None = None,
) -> int:
    if delta == 0:
        raise ZeroAdjustmentError(product.code)

    new_stock = product.stock + delta
    if new_stock < 0:
        raise NegativeStockError(product.code, product.stock, delta)

    product.stock = new_stock
    ledger.append(
        db,
        product_code=product.code,
        kind=kind,
        quantity=abs(delta),
        reason=reason,
        happened_at=happened_at,
    )

    logger.debug("%s %s %+d -> %d (%s)", kind.value, product.code, delta, new_stock, reason)
    return new_stock


def adjust_stock(
    db: Session,
    code: str,
    delta: int,
    reason: str,
    *,
    cancel_event: threading.Event | None = None,
) -> int:
    """Manual correction (count, damage, loss). Returns the new stock."""
    if len(reason) > ADJUSTMENT_REASON_MAX:
        raise ValidationError(
            f"Adjustment reason is longer than {ADJUSTMENT_REASON_MAX} characters",
            product_code=code,
        )

    def work(uow: UnitOfWork) -> int:
        product = catalog.get_product(db, code, lock=True)
        if delta == 0:
            raise ZeroAdjustmentError(code)

        kind = MovementKind.entrada if delta > 0 else MovementKind.salida
        return apply_delta(db, product, delta, kind, f"{ADJUSTMENT_REASON_PREFIX}{reason}")

    new_stock = run_in_unit_of_work(db, work, name="adjust_stock", cancel_event=cancel_event)
    logger.info("Stock of %s adjusted by %+d -> %d", code, delta, new_stock)
    return new_stock


def reconcile(db: Session, code: str, initial_stock: int = 0) -> bool:
    """True when the stock counter equals initial_stock + signed ledger sum."""
    product = catalog.get_product(db, code)
    return product.stock == initial_stock + ledger.net_quantity(db, code)
