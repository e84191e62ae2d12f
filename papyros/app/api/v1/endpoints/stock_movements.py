from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from papyros.app.db.session import get_db
from papyros.app.core.config import settings
from papyros.app.db.models.core_types import MovementKind
from papyros.app.schemas.stock_movement import StockMovementRead
from papyros.services import ledger

router = APIRouter(prefix="/stock-movements")


@router.get("", response_model=list[StockMovementRead])
def list_movements(
    product_code: str | None = None,
    kind: MovementKind | None = None,
    limit: int = Query(default=settings.MOVEMENT_HISTORY_LIMIT, gt=0, le=1000),
    db: Session = Depends(get_db),
):
    """
    Movement ledger (READ ONLY), newest first.
    Entries are written exclusively by the stock mutator.
    """
    return ledger.history(db, product_code=product_code, kind=kind, limit=limit)
