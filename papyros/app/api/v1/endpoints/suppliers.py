from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.db.models.models_v1 import Supplier
from papyros.app.schemas.procurement import SupplierCreate
from papyros.services import procurement

router = APIRouter(prefix="/suppliers")


def _supplier_out(s: Supplier) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "tax_id": s.tax_id,
        "contact_name": s.contact_name,
        "phone": s.phone,
        "email": s.email,
        "active": s.active,
    }


@router.get("")
def list_suppliers(db: Session = Depends(get_db)):
    return [_supplier_out(s) for s in procurement.list_active_suppliers(db)]


@router.get("/{supplier_id}")
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return _supplier_out(procurement.get_supplier(db, supplier_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    s = procurement.create_supplier(
        db,
        name=payload.name,
        tax_id=payload.tax_id,
        contact_name=payload.contact_name,
        phone=payload.phone,
        email=payload.email,
        notes=payload.notes,
    )
    return _supplier_out(s)
