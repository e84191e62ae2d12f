from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.core.errors import PurchaseOrderNotFound
from papyros.app.db.models.core_types import POStatus
from papyros.app.db.models.models_v1 import PurchaseOrder
from papyros.app.schemas.procurement import POCancel, POCreate
from papyros.services import procurement
from papyros.services.procurement import PurchaseOrderLineInput

router = APIRouter(prefix="/purchase-orders")


def _po_out(po: PurchaseOrder, with_lines: bool = True) -> dict:
    out = {
        "id": po.id,
        "supplier_id": po.supplier_id,
        "status": po.status,
        "issued_at": po.issued_at,
        "expected_at": po.expected_at,
        "total": float(po.total),
        "cancel_reason": po.cancel_reason,
    }
    if with_lines:
        out["lines"] = [
            {
                "product_code": l.product_code,
                "quantity": l.quantity,
                "unit_cost": float(l.unit_cost),
                "subtotal": float(l.subtotal),
            }
            for l in po.lines
        ]
    return out


def _get_or_404(db: Session, po_id: int) -> PurchaseOrder:
    # PurchaseOrderNotFound is a 400 when raised from a reception; here the
    # PO is the addressed resource
    try:
        return procurement.get_purchase_order(db, po_id)
    except PurchaseOrderNotFound:
        raise HTTPException(status_code=404, detail="PO not found")


@router.get("")
def list_pos(status: POStatus | None = None, db: Session = Depends(get_db)):
    return [_po_out(po, with_lines=False) for po in procurement.list_purchase_orders(db, status=status)]


@router.get("/{po_id}")
def get_po(po_id: int, db: Session = Depends(get_db)):
    return _po_out(_get_or_404(db, po_id))


@router.post("", status_code=201)
def create_po(payload: POCreate, db: Session = Depends(get_db)):
    po = procurement.create_purchase_order(
        db,
        supplier_id=payload.supplier_id,
        expected_at=payload.expected_at,
        lines=[PurchaseOrderLineInput(ln.product_code, ln.quantity, ln.unit_cost) for ln in payload.lines],
    )
    return _po_out(po)


@router.post("/{po_id}/close")
def close_po(po_id: int, db: Session = Depends(get_db)):
    _get_or_404(db, po_id)
    return _po_out(procurement.close_purchase_order(db, po_id))


@router.post("/{po_id}/cancel")
def cancel_po(po_id: int, payload: POCancel, db: Session = Depends(get_db)):
    _get_or_404(db, po_id)
    return _po_out(procurement.cancel_purchase_order(db, po_id, payload.reason))
