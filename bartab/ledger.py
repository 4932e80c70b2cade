"""Tab ledger: the open/closed state machine for comandas."""

from __future__ import annotations

import logging
from copy import deepcopy
from decimal import Decimal

from bartab.catalog import CatalogManager
from bartab.config import GUEST
from bartab.errors import AlreadyOpen, InsufficientStock, ProductNotFound
from bartab.models import LineItem, Tab, TabStatus, new_id, to_money, utc_now
from bartab.persistence import SLOT_COMANDAS, SLOT_PRODUCTS
from bartab.state import BarState

logger = logging.getLogger(__name__)


class TabLedger:
    """
    Owns the tabs and keeps their totals and the catalog stock consistent.

    Each operation validates everything it needs before touching state, under
    the shared state lock, so a rejection leaves products and tabs unchanged.
    Unknown tab or line item ids are ignored.
    """

    def __init__(self, state: BarState, catalog: CatalogManager) -> None:
        self.state = state
        self.catalog = catalog

    def _find_tab(self, tab_id: str) -> Tab | None:
        for tab in self.state.tabs:
            if tab.id == tab_id:
                return tab
        return None

    def _open_tab_for(self, holder: str) -> Tab | None:
        # Newest first, so a guest lands on the most recently opened guest tab.
        for tab in reversed(self.state.tabs):
            if tab.holder == holder and tab.is_open:
                return tab
        return None

    def _new_tab(self, holder: str) -> Tab:
        tab = Tab(id=new_id(), holder=holder, opened_at=utc_now())
        self.state.tabs.append(tab)
        logger.info("tab_opened id=%s holder=%s", tab.id, holder)
        return tab

    def _ensure_open_tab(self, holder: str, tab_id: str | None = None) -> Tab:
        if tab_id is not None:
            tab = self._find_tab(tab_id)
            if tab is not None and tab.is_open and tab.holder == holder:
                return tab
        return self._open_tab_for(holder) or self._new_tab(holder)

    def open_tab(self, holder: str) -> str:
        with self.state.lock:
            if holder != GUEST and self._open_tab_for(holder) is not None:
                raise AlreadyOpen(holder)
            tab = self._new_tab(holder)
            self.state.commit(SLOT_COMANDAS)
            return tab.id

    def record_consumption(
        self, holder: str, product_id: str, quantity: int = 1, tab_id: str | None = None
    ) -> LineItem:
        """
        Add ``quantity`` of a product to the holder's open tab and take it from stock.

        A guest may hold several open tabs; ``tab_id`` picks one of them.
        Without it (or if it does not name an open tab of this holder) the
        newest open tab is used, and one is opened if the holder has none.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be a whole number")
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        with self.state.lock:
            product = self.state.find_product(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if not product.is_unlimited and product.stock < quantity:
                raise InsufficientStock(product_id, product.stock, quantity)

            item = LineItem(
                id=new_id(),
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.unit_price,
                line_total=to_money(product.unit_price * quantity),
                timestamp=utc_now(),
            )
            tab = self._ensure_open_tab(holder, tab_id)
            tab.items.append(item)
            tab.recompute_total()
            self.catalog.adjust_stock(product.id, -quantity, commit=False)
            self.state.commit(SLOT_COMANDAS, SLOT_PRODUCTS)
            logger.info(
                "consumption_recorded tab=%s product=%s qty=%d total=%s",
                tab.id,
                product.id,
                quantity,
                tab.total,
            )
        return item

    def remove_line_item(self, tab_id: str, item_id: str) -> None:
        """Take a line item off an open tab and put its quantity back in stock."""
        with self.state.lock:
            tab = self._find_tab(tab_id)
            if tab is None or not tab.is_open:
                logger.debug("remove_item_ignored tab=%s reason=not_found_or_closed", tab_id)
                return
            item = next((i for i in tab.items if i.id == item_id), None)
            if item is None:
                logger.debug("remove_item_ignored tab=%s item=%s reason=not_found", tab_id, item_id)
                return

            tab.items = [i for i in tab.items if i.id != item_id]
            tab.recompute_total()
            # Restock follows the product as it is now; a deleted product has nothing to restock.
            self.catalog.adjust_stock(item.product_id, item.quantity, commit=False)
            self.state.commit(SLOT_COMANDAS, SLOT_PRODUCTS)
            logger.info("item_removed tab=%s item=%s qty=%d", tab_id, item_id, item.quantity)

    def close_tab(self, tab_id: str) -> None:
        with self.state.lock:
            tab = self._find_tab(tab_id)
            if tab is None or not tab.is_open:
                return
            tab.status = TabStatus.CLOSED
            tab.closed_at = utc_now()
            self.state.commit(SLOT_COMANDAS)
            logger.info("tab_closed id=%s total=%s", tab_id, tab.total)

    def purge_history(self) -> int:
        """Delete every closed tab. Returns how many were removed."""
        with self.state.lock:
            kept = [tab for tab in self.state.tabs if tab.is_open]
            removed = len(self.state.tabs) - len(kept)
            if removed:
                self.state.tabs = kept
                self.state.commit(SLOT_COMANDAS)
        logger.info("history_purged removed=%d", removed)
        return removed

    def get(self, tab_id: str) -> Tab | None:
        with self.state.lock:
            tab = self._find_tab(tab_id)
            return deepcopy(tab) if tab is not None else None

    def list_open(self) -> list[Tab]:
        with self.state.lock:
            return [deepcopy(tab) for tab in self.state.tabs if tab.is_open]

    def list_closed(self) -> list[Tab]:
        """Closed tabs, most recently closed first."""
        with self.state.lock:
            closed = [deepcopy(tab) for tab in self.state.tabs if not tab.is_open]
        closed.sort(key=lambda tab: tab.closed_at or tab.opened_at, reverse=True)
        return closed

    def open_tab_for(self, holder: str) -> Tab | None:
        with self.state.lock:
            tab = self._open_tab_for(holder)
            return deepcopy(tab) if tab is not None else None

    def open_total_for(self, holder: str) -> Decimal:
        """What the holder currently owes across their open tabs."""
        with self.state.lock:
            return sum(
                (tab.total for tab in self.state.tabs if tab.holder == holder and tab.is_open),
                Decimal("0.00"),
            )
