"""
Domain errors raised by the inventory core.

Every error carries a machine-readable ``kind`` and, where one applies, the
offending ``field`` so the HTTP layer can render a structured response.
"""
from typing import Any, Dict, Optional


class InventoryError(Exception):
    kind = "inventory_error"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "error": self.kind, "field": self.field}


class ProductNotFoundError(InventoryError):
    kind = "not_found"
    status_code = 404

    def __init__(self, product_id: Any):
        super().__init__(f"Product {product_id} not found", field="id")
        self.product_id = product_id


class DuplicateSkuError(InventoryError):
    kind = "duplicate_sku"

    def __init__(self, sku: str):
        super().__init__(f"Product with SKU '{sku}' already exists", field="sku")
        self.sku = sku


class InsufficientQuantityError(InventoryError):
    kind = "insufficient_quantity"

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Insufficient quantity: {available} on hand, adjustment of {requested} requested",
            field="quantity",
        )
        self.available = available
        self.requested = requested


class InvalidInputError(InventoryError):
    kind = "invalid_input"


class NoEligibleProductsError(InventoryError):
    kind = "no_eligible_products"
    status_code = 404

    def __init__(self, message: str = "No valid products found", field: Optional[str] = "productIds"):
        super().__init__(message, field=field)


class StorageUnavailableError(InventoryError):
    kind = "storage_unavailable"
    status_code = 503

    def __init__(self, message: str = "Storage is unavailable"):
        super().__init__(message)
