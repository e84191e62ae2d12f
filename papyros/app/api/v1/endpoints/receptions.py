from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.db.models.models_v1 import Reception
from papyros.app.schemas.reception import ReceptionCreate
from papyros.services import catalog, receptions
from papyros.services.receptions import ReceptionLineInput

router = APIRouter(prefix="/receptions")


def _reception_out(db: Session, r: Reception) -> dict:
    names = {
        code: p.name
        for code, p in catalog.find_by_codes(db, (l.product_code for l in r.lines), active_only=False).items()
    }
    return {
        "id": r.id,
        "received_at": r.received_at,
        "purchase_order_id": r.purchase_order_id,
        "invoice_ref": r.invoice_ref,
        "lines": [
            {
                "id": l.id,
                "product_code": l.product_code,
                "product_name": names.get(l.product_code),
                "quantity": l.quantity,
            }
            for l in r.lines
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def register_reception(payload: ReceptionCreate, db: Session = Depends(get_db)):
    r = receptions.register_reception(
        db,
        payload.purchase_order_id,
        payload.invoice_ref,
        [ReceptionLineInput(ln.product_code, ln.quantity) for ln in payload.lines],
    )
    return _reception_out(db, r)


@router.get("/{reception_id}")
def get_reception(reception_id: int, db: Session = Depends(get_db)):
    return _reception_out(db, receptions.get_reception(db, reception_id))
