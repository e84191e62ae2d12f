from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from papyros.app.db.models.core_types import MovementKind
from papyros.services.inventory import ADJUSTMENT_REASON_MAX


class StockMovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_code: str
    kind: MovementKind
    quantity: int  # always > 0, sign carried by kind
    reason: str
    happened_at: datetime


class StockAdjustmentCreate(BaseModel):
    quantity: int
    reason: str = Field(default="", max_length=ADJUSTMENT_REASON_MAX)
