"""Exception types raised by the bar data layer."""

from __future__ import annotations


class BarTabError(Exception):
    """Base class for all bartab errors."""


class LedgerRejection(BarTabError):
    """A user-facing rejection. The operation was aborted with no state change."""


class AlreadyOpen(LedgerRejection):
    def __init__(self, holder: str) -> None:
        super().__init__("This member already has an open tab.")
        self.holder = holder


class ProductNotFound(LedgerRejection):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product {product_id} not found.")
        self.product_id = product_id


class InsufficientStock(LedgerRejection):
    def __init__(self, product_id: str, available: int, requested: int) -> None:
        super().__init__(f"Insufficient stock: {available} left, {requested} requested.")
        self.product_id = product_id
        self.available = available
        self.requested = requested


class PersistenceError(BarTabError):
    """The durable store could not read or write a slot."""
