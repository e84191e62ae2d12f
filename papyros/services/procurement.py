"""
Procurement service.

Suppliers and purchase orders. A purchase order is only read by the
reception processor (existence check); this module never touches stock.
All stock logic lives in:
    papyros.services.inventory
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from papyros.app.core.errors import (
    DuplicateSupplier,
    EmptyOrderError,
    InvalidPrice,
    InvalidQuantity,
    ProductNotFoundOrInactive,
    PurchaseOrderNotFound,
    SupplierNotFound,
    ValidationError,
)
from papyros.app.db.models.core_types import POStatus
from papyros.app.db.models.models_v1 import PurchaseOrder, PurchaseOrderLine, Supplier, money
from papyros.services import catalog
from papyros.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class PurchaseOrderLineInput:
    product_code: str
    quantity: int
    unit_cost: Decimal


# ---------- SUPPLIERS ----------
def create_supplier(
    db: Session,
    *,
    name: str,
    tax_id: str,
    contact_name: str,
    phone: str,
    email: str,
    notes: str = "",
) -> Supplier:
    required = {
        "name": name,
        "tax_id": tax_id,
        "contact_name": contact_name,
        "phone": phone,
        "email": email,
    }
    for field, value in required.items():
        if not value or not value.strip():
            raise ValidationError(f"{field} is required", field=field)

    # Stored values are stripped, so the uniqueness check must be too
    name = name.strip()
    tax_id = tax_id.strip()

    try:
        email = _email_adapter.validate_python(email.strip())
    except PydanticValidationError:
        raise ValidationError("email is not valid", field="email") from None

    with UnitOfWork(db):
        exists = db.execute(
            select(Supplier).where(or_(Supplier.name == name, Supplier.tax_id == tax_id))
        ).scalars().first()
        if exists is not None:
            field = "name" if exists.name == name else "tax_id"
            raise DuplicateSupplier(f"A supplier with this {field} already exists", field=field)

        s = Supplier(
            name=name,
            tax_id=tax_id,
            contact_name=contact_name.strip(),
            phone=phone.strip(),
            email=email,
            notes=notes or "",
            active=True,
        )
        db.add(s)

        try:
            db.flush()
        except IntegrityError as exc:
            raise DuplicateSupplier("A supplier with this name or tax_id already exists") from exc

    logger.info("Supplier %s registered", s.name)
    return s


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    s = db.get(Supplier, supplier_id)
    if s is None:
        raise SupplierNotFound(supplier_id)
    return s


def list_active_suppliers(db: Session) -> list[Supplier]:
    stmt = select(Supplier).where(Supplier.active.is_(True)).order_by(Supplier.name)
    return list(db.execute(stmt).scalars().all())


# ---------- PURCHASE ORDERS ----------
def create_purchase_order(
    db: Session,
    *,
    supplier_id: int,
    lines: Iterable[PurchaseOrderLineInput],
    expected_at: datetime | None = None,
) -> PurchaseOrder:
    lines = list(lines)
    if not lines:
        raise EmptyOrderError("A purchase order must have at least one line")

    with UnitOfWork(db):
        supplier = db.get(Supplier, supplier_id)
        if supplier is None or not supplier.active:
            raise SupplierNotFound(supplier_id)

        products = catalog.find_by_codes(db, (ln.product_code for ln in lines))
        for ln in lines:
            if ln.product_code not in products:
                raise ProductNotFoundOrInactive(ln.product_code)
            if ln.quantity <= 0:
                raise InvalidQuantity(ln.quantity, ln.product_code)
            if money(ln.unit_cost) < 0:
                raise InvalidPrice("Unit cost cannot be negative", product_code=ln.product_code)

        po = PurchaseOrder(supplier_id=supplier.id, status=POStatus.emitida, expected_at=expected_at)
        for ln in lines:
            unit_cost = money(ln.unit_cost)
            po.lines.append(
                PurchaseOrderLine(
                    product_code=ln.product_code,
                    quantity=ln.quantity,
                    unit_cost=unit_cost,
                    subtotal=money(unit_cost * ln.quantity),
                )
            )
        po.emit()
        db.add(po)

    logger.info("Purchase order #%s issued to supplier %s, total=%s", po.id, supplier_id, po.total)
    return po


def get_purchase_order(db: Session, po_id: int) -> PurchaseOrder:
    po = (
        db.execute(
            select(PurchaseOrder)
            .where(PurchaseOrder.id == po_id)
            .options(selectinload(PurchaseOrder.lines))
        )
        .scalars()
        .first()
    )
    if po is None:
        raise PurchaseOrderNotFound(po_id)
    return po


def list_purchase_orders(db: Session, *, status: POStatus | None = None) -> list[PurchaseOrder]:
    stmt = select(PurchaseOrder).order_by(PurchaseOrder.id.desc())
    if status is not None:
        stmt = stmt.where(PurchaseOrder.status == status)
    return list(db.execute(stmt).scalars().all())


def close_purchase_order(db: Session, po_id: int) -> PurchaseOrder:
    with UnitOfWork(db):
        po = get_purchase_order(db, po_id)
        po.close_if_complete()
    return po


def cancel_purchase_order(db: Session, po_id: int, reason: str) -> PurchaseOrder:
    with UnitOfWork(db):
        po = get_purchase_order(db, po_id)
        po.cancel(reason)

    logger.info("Purchase order #%s cancelled: %s", po_id, reason)
    return po
