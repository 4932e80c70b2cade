"""Product catalog and stock levels."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from decimal import Decimal
from typing import Any

from bartab.config import LOW_STOCK_THRESHOLD, UNLIMITED_STOCK
from bartab.errors import InsufficientStock
from bartab.models import Product, new_id, to_money
from bartab.persistence import SLOT_PRODUCTS
from bartab.state import BarState

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {f.name for f in fields(Product)} - {"id"}


def _validate_stock(stock: int) -> int:
    stock = int(stock)
    if stock < 0 and stock != UNLIMITED_STOCK:
        raise ValueError("stock must be non-negative or UNLIMITED_STOCK")
    return stock


def _validate_price(unit_price: Any) -> Decimal:
    price = to_money(unit_price)
    if price < 0:
        raise ValueError("unit_price must be non-negative")
    return price


class CatalogManager:
    """
    Owns the product list.

    Readers get copies. Unknown ids on update/remove are ignored.
    """

    def __init__(self, state: BarState) -> None:
        self.state = state

    def get(self, product_id: str) -> Product | None:
        with self.state.lock:
            product = self.state.find_product(product_id)
            return replace(product) if product is not None else None

    def list(self) -> list[Product]:
        with self.state.lock:
            return [replace(p) for p in self.state.products]

    def search(self, term: str) -> list[Product]:
        """Case-insensitive name match; empty term returns everything."""
        needle = term.strip().lower()
        with self.state.lock:
            if not needle:
                return [replace(p) for p in self.state.products]
            return [replace(p) for p in self.state.products if needle in p.name.lower()]

    def low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
        with self.state.lock:
            return [replace(p) for p in self.state.products if not p.is_unlimited and p.stock < threshold]

    def create(self, name: str, unit_price: Any, stock: int, category: str) -> Product:
        product = Product(
            id=new_id(),
            name=name.strip(),
            unit_price=_validate_price(unit_price),
            stock=_validate_stock(stock),
            category=category.strip(),
        )
        if not product.name:
            raise ValueError("Product name is required")
        with self.state.lock:
            self.state.products.append(product)
            self.state.commit(SLOT_PRODUCTS)
        logger.info("product_created id=%s name=%r", product.id, product.name)
        return replace(product)

    def update(self, product_id: str, **changes: Any) -> None:
        """Merge ``changes`` into the product; no-op if the id is unknown."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update product fields: {sorted(unknown)}")
        if "unit_price" in changes:
            changes["unit_price"] = _validate_price(changes["unit_price"])
        if "stock" in changes:
            changes["stock"] = _validate_stock(changes["stock"])
        if "category" in changes:
            changes["category"] = changes["category"].strip()
        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValueError("Product name is required")

        with self.state.lock:
            for idx, product in enumerate(self.state.products):
                if product.id == product_id:
                    self.state.products[idx] = replace(product, **changes)
                    self.state.commit(SLOT_PRODUCTS)
                    return
        logger.debug("product_update_ignored id=%s reason=not_found", product_id)

    def remove(self, product_id: str) -> None:
        with self.state.lock:
            before = len(self.state.products)
            self.state.products = [p for p in self.state.products if p.id != product_id]
            if len(self.state.products) == before:
                logger.debug("product_remove_ignored id=%s reason=not_found", product_id)
                return
            self.state.commit(SLOT_PRODUCTS)

    def adjust_stock(self, product_id: str, delta: int, commit: bool = True) -> None:
        """
        Shift finite stock by ``delta``.

        Unlimited and unknown products are left alone. Pass ``commit=False``
        when the caller persists the products slot together with its own.
        """
        with self.state.lock:
            product = self.state.find_product(product_id)
            if product is None or product.is_unlimited:
                return
            new_stock = product.stock + delta
            if new_stock < 0:
                raise InsufficientStock(product_id, product.stock, -delta)
            product.stock = new_stock
            if commit:
                self.state.commit(SLOT_PRODUCTS)
