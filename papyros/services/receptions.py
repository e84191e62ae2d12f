"""
Reception processor (goods received against a purchase order).

Same two-phase shape as the sale processor, inbound only: no stock
sufficiency check, one ENTRADA ledger entry per line.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from papyros.app.core.errors import (
    EmptyOrderError,
    InvalidQuantity,
    ProductNotFoundOrInactive,
    PurchaseOrderNotFound,
    ReceptionNotFound,
)
from papyros.app.db.models.core_types import MovementKind
from papyros.app.db.models.models_v1 import Product, PurchaseOrder, Reception, ReceptionLine
from papyros.services import catalog
from papyros.services.inventory import apply_delta
from papyros.services.unit_of_work import UnitOfWork, run_in_unit_of_work

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceptionLineInput:
    product_code: str
    quantity: int


def reception_reason(purchase_order_id: int, invoice_ref: str) -> str:
    return f"RECEPCION OC #{purchase_order_id} - {invoice_ref}"


def _validate_lines(lines: list[ReceptionLineInput], products: dict[str, Product]) -> None:
    for ln in lines:
        if ln.product_code not in products:
            raise ProductNotFoundOrInactive(ln.product_code)
        if ln.quantity <= 0:
            raise InvalidQuantity(ln.quantity, ln.product_code)


def register_reception(
    db: Session,
    purchase_order_id: int,
    invoice_ref: str,
    lines: Iterable[ReceptionLineInput],
    *,
    cancel_event: threading.Event | None = None,
) -> Reception:
    lines = [ReceptionLineInput(ln.product_code, int(ln.quantity)) for ln in lines]
    if not lines:
        raise EmptyOrderError("A reception must have at least one line")

    def work(uow: UnitOfWork) -> Reception:
        po = db.get(PurchaseOrder, purchase_order_id)
        if po is None:
            raise PurchaseOrderNotFound(purchase_order_id)

        products = catalog.find_by_codes(db, (ln.product_code for ln in lines), lock=True)
        _validate_lines(lines, products)

        reception = Reception(purchase_order_id=po.id, invoice_ref=invoice_ref)
        db.add(reception)

        reason = reception_reason(po.id, invoice_ref)
        for ln in lines:
            product = products[ln.product_code]
            reception.lines.append(ReceptionLine(product_code=product.code, quantity=ln.quantity))
            apply_delta(db, product, ln.quantity, MovementKind.entrada, reason)
            uow.check_cancelled()

        return reception

    reception = run_in_unit_of_work(db, work, name="register_reception", cancel_event=cancel_event)
    logger.info(
        "Reception #%s registered for PO #%s (%s): %d line(s)",
        reception.id,
        purchase_order_id,
        invoice_ref,
        len(lines),
    )
    return reception


def get_reception(db: Session, reception_id: int) -> Reception:
    reception = (
        db.execute(
            select(Reception)
            .where(Reception.id == reception_id)
            .options(selectinload(Reception.lines))
        )
        .scalars()
        .first()
    )
    if reception is None:
        raise ReceptionNotFound(reception_id)
    return reception
