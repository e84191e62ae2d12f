from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field


class SupplierCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    tax_id: str = Field(min_length=1, max_length=32)
    contact_name: str = Field(min_length=1, max_length=200)
    phone: str = Field(min_length=1, max_length=32)
    email: EmailStr
    notes: str = ""


class POLineCreate(BaseModel):
    product_code: str = Field(min_length=1, max_length=64)
    quantity: int = Field(gt=0)
    unit_cost: Decimal = Field(ge=0)


class POCreate(BaseModel):
    supplier_id: int
    expected_at: datetime | None = None
    lines: list[POLineCreate] = Field(default_factory=list)


class POCancel(BaseModel):
    reason: str = Field(min_length=1, max_length=255)
