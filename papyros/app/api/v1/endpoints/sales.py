from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.db.models.models_v1 import Sale
from papyros.app.schemas.sale import PosLineValidate, SaleCreate
from papyros.services import catalog, sales
from papyros.services.sales import SaleLineInput

router = APIRouter(prefix="/sales")


def _sale_out(db: Session, sale: Sale) -> dict:
    names = {
        code: p.name
        for code, p in catalog.find_by_codes(db, (l.product_code for l in sale.lines), active_only=False).items()
    }
    return {
        "id": sale.id,
        "created_at": sale.created_at,
        "total": float(sale.total),
        "status": sale.status,
        "payment_method": sale.payment_method,
        "lines": [
            {
                "id": l.id,
                "product_code": l.product_code,
                "product_name": names.get(l.product_code),
                "quantity": l.quantity,
                "unit_price": float(l.unit_price),
                "subtotal": float(l.subtotal),
            }
            for l in sale.lines
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def register_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    sale = sales.register_sale(
        db,
        [SaleLineInput(ln.product_code, ln.quantity, ln.unit_price) for ln in payload.lines],
        payload.payment_method,
    )
    return _sale_out(db, sale)


@router.get("/pos/search")
def search_pos_products(q: str = "", db: Session = Depends(get_db)):
    return [
        {
            "code": p.code,
            "name": p.name,
            "category": p.category,
            "price": float(p.price),
            "available": p.stock,
        }
        for p in sales.search_pos_products(db, q)
    ]


@router.post("/pos/validate-line")
def validate_pos_line(payload: PosLineValidate, db: Session = Depends(get_db)):
    check = sales.validate_pos_line(db, payload.product_code, payload.quantity)
    return {
        "product_code": check.product_code,
        "product_name": check.product_name,
        "quantity": check.quantity,
        "unit_price": float(check.unit_price),
        "subtotal": float(check.subtotal),
        "remaining_stock": check.remaining_stock,
    }


@router.get("/{sale_id}")
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    return _sale_out(db, sales.get_sale(db, sale_id))
