"""Errors raised by store and chain bookkeeping.

Every failed operation leaves the store or chain exactly as it was, so
callers may catch any of these and carry on.
"""


class InventoryError(Exception):
    """Base class for every bookkeeping rule violation."""


class DuplicateProductError(InventoryError):
    def __init__(self, product_id: int, name: str, store_name: str):
        super().__init__(
            f"Product '{name}' (ID: {product_id}) is already registered in {store_name}."
        )
        self.product_id = product_id


class UnknownProductError(InventoryError, LookupError):
    def __init__(self, product_id: int, store_name: str | None = None):
        where = f" in {store_name}" if store_name else ""
        super().__init__(
            f"Product with ID {product_id} is not registered{where}. "
            "Call register_product() first."
        )
        self.product_id = product_id


class InvalidQuantityError(InventoryError, ValueError):
    def __init__(self, product_id: int, quantity: int):
        super().__init__(
            f"Quantity for product {product_id} must be bigger than 0 (got {quantity})."
        )
        self.product_id = product_id
        self.quantity = quantity


class InsufficientStockError(InventoryError):
    def __init__(self, product_id: int, name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for '{name}' (ID: {product_id}): "
            f"available {available}, requested {requested}."
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class DuplicateStoreError(InventoryError):
    def __init__(self, store_id: int):
        super().__init__(f"Cannot add: Supermarket with ID {store_id} already exists.")
        self.store_id = store_id


class UnknownStoreError(InventoryError, LookupError):
    def __init__(self, store_id: int):
        super().__init__(f"Supermarket with ID {store_id} not found.")
        self.store_id = store_id
