from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.db.models.models_v1 import Product
from papyros.app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from papyros.app.schemas.stock_movement import StockAdjustmentCreate
from papyros.services import catalog, inventory

router = APIRouter(prefix="/products")


def _product_out(p: Product) -> dict:
    return ProductRead.model_validate(p).model_dump()


@router.get("", response_model=list[ProductRead])
def list_products(
    q: str | None = None,
    low_stock: bool = False,
    db: Session = Depends(get_db),
):
    """
    Active products only.
    - q: substring of code, name or category
    - low_stock: stock <= min_stock
    """
    return [_product_out(p) for p in catalog.search_products(db, q, low_stock=low_stock)]


@router.get("/{code}", response_model=ProductRead)
def get_product(code: str, db: Session = Depends(get_db)):
    return _product_out(catalog.get_product(db, code))


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    # initial stock is always 0: receptions and adjustments raise it
    p = catalog.create_product(
        db,
        code=payload.code,
        name=payload.name,
        category=payload.category,
        cost=payload.cost,
        price=payload.price,
        min_stock=payload.min_stock,
    )
    return _product_out(p)


@router.put("/{code}", response_model=ProductRead)
def update_product(code: str, payload: ProductUpdate, db: Session = Depends(get_db)):
    p = catalog.update_product(
        db,
        code,
        name=payload.name,
        category=payload.category,
        cost=payload.cost,
        price=payload.price,
        min_stock=payload.min_stock,
    )
    return _product_out(p)


@router.post("/{code}/deactivate", response_model=ProductRead)
def deactivate_product(code: str, db: Session = Depends(get_db)):
    return _product_out(catalog.deactivate_product(db, code))


@router.post("/{code}/reactivate", response_model=ProductRead)
def reactivate_product(code: str, db: Session = Depends(get_db)):
    return _product_out(catalog.reactivate_product(db, code))


@router.post("/{code}/adjust-stock")
def adjust_stock(code: str, payload: StockAdjustmentCreate, db: Session = Depends(get_db)):
    new_stock = inventory.adjust_stock(db, code, payload.quantity, payload.reason)
    return {"code": code, "stock": new_stock}
