from pydantic import BaseModel, Field


class ReceptionLineCreate(BaseModel):
    product_code: str = Field(min_length=1, max_length=64)
    quantity: int


class ReceptionCreate(BaseModel):
    purchase_order_id: int
    invoice_ref: str = Field(min_length=1, max_length=64)
    lines: list[ReceptionLineCreate] = Field(default_factory=list)
