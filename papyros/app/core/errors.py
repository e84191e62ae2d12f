"""
Domain error taxonomy.

Every error raised by the stock engine derives from PapyrosError and carries
a stable ``code`` plus the HTTP status the API layer renders it with.
Validation and referential errors are raised before any write; business-rule
errors abort the whole operation; infrastructure errors are not wrapped here
and propagate after rollback.
"""
from __future__ import annotations

from typing import Any


class PapyrosError(Exception):
    code = "papyros_error"
    status_code = 400

    def __init__(self, detail: str, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.detail, **self.extra}


# ---------- VALIDATION ----------
class ValidationError(PapyrosError):
    code = "validation_error"


class EmptyOrderError(ValidationError):
    code = "empty_order"

    def __init__(self, detail: str = "At least one line is required"):
        super().__init__(detail)


class InvalidQuantity(ValidationError):
    code = "invalid_quantity"

    def __init__(self, quantity: int, product_code: str | None = None):
        super().__init__(
            f"Quantity must be > 0 (got {quantity})",
            product_code=product_code,
            quantity=quantity,
        )


class InvalidPrice(ValidationError):
    code = "invalid_price"


class ZeroAdjustmentError(ValidationError):
    code = "zero_adjustment"

    def __init__(self, product_code: str):
        super().__init__("Adjustment quantity cannot be 0", product_code=product_code)


# ---------- REFERENTIAL ----------
class NotFoundError(PapyrosError):
    code = "not_found"
    status_code = 404


class ProductNotFound(NotFoundError):
    code = "product_not_found"

    def __init__(self, product_code: str):
        super().__init__(f"Product {product_code} not found", product_code=product_code)


class ProductNotFoundOrInactive(NotFoundError):
    code = "product_not_found_or_inactive"
    status_code = 400

    def __init__(self, product_code: str):
        super().__init__(
            f"Product {product_code} does not exist or is inactive",
            product_code=product_code,
        )


class PurchaseOrderNotFound(NotFoundError):
    code = "purchase_order_not_found"
    status_code = 400

    def __init__(self, purchase_order_id: int):
        super().__init__(
            f"Purchase order {purchase_order_id} does not exist",
            purchase_order_id=purchase_order_id,
        )


class SaleNotFound(NotFoundError):
    code = "sale_not_found"

    def __init__(self, sale_id: int):
        super().__init__(f"Sale {sale_id} not found", sale_id=sale_id)


class ReceptionNotFound(NotFoundError):
    code = "reception_not_found"

    def __init__(self, reception_id: int):
        super().__init__(f"Reception {reception_id} not found", reception_id=reception_id)


class SupplierNotFound(NotFoundError):
    code = "supplier_not_found"

    def __init__(self, supplier_id: int):
        super().__init__(f"Supplier {supplier_id} not found", supplier_id=supplier_id)


# ---------- CONFLICTS ----------
class ConflictError(PapyrosError):
    code = "conflict"
    status_code = 409


class DuplicateCode(ConflictError):
    code = "duplicate_code"

    def __init__(self, product_code: str):
        super().__init__(f"A product with code {product_code} already exists", product_code=product_code)


class DuplicateSupplier(ConflictError):
    code = "duplicate_supplier"


class StockConflictError(ConflictError):
    """Concurrent writers kept invalidating the product rows; caller may retry."""

    code = "stock_conflict"


# ---------- BUSINESS RULES ----------
class BusinessRuleError(PapyrosError):
    code = "business_rule_violation"


class InsufficientStock(BusinessRuleError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, product_code: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for {product_code}. Available: {available}",
            product_code=product_code,
            available=available,
            requested=requested,
        )
        self.product_code = product_code
        self.available = available
        self.requested = requested


class NegativeStockError(BusinessRuleError):
    code = "negative_stock"

    def __init__(self, product_code: str, stock: int, delta: int):
        super().__init__(
            f"Movement of {delta} would leave {product_code} with negative stock (current={stock})",
            product_code=product_code,
            stock=stock,
            delta=delta,
        )
        self.product_code = product_code
        self.stock = stock
        self.delta = delta


class InvalidStateTransition(BusinessRuleError):
    code = "invalid_state_transition"


class OperationCancelled(PapyrosError):
    code = "operation_cancelled"
    status_code = 499

    def __init__(self, detail: str = "Operation cancelled before commit"):
        super().__init__(detail)
