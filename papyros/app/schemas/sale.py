from decimal import Decimal

from pydantic import BaseModel, Field

from papyros.app.db.models.core_types import PaymentMethod


class SaleLineCreate(BaseModel):
    product_code: str = Field(min_length=1, max_length=64)
    quantity: int
    unit_price: Decimal


class SaleCreate(BaseModel):
    payment_method: PaymentMethod
    lines: list[SaleLineCreate] = Field(default_factory=list)


class PosLineValidate(BaseModel):
    product_code: str = Field(min_length=1, max_length=64)
    quantity: int
