"""In-memory aggregate of products, members and tabs, kept in sync with the store."""

from __future__ import annotations

import logging
import threading

from bartab.constant import INITIAL_MEMBERS, INITIAL_PRODUCTS
from bartab.errors import PersistenceError
from bartab.models import Member, Product, Tab, new_id, to_money
from bartab.persistence import SLOT_COMANDAS, SLOT_MEMBERS, SLOT_PRODUCTS, SLOTS, DurableStore

logger = logging.getLogger(__name__)


def _seed_products() -> list[Product]:
    return [
        Product(
            id=new_id(),
            name=str(raw["name"]),
            unit_price=to_money(raw["unit_price"]),
            stock=int(raw["stock"]),  # type: ignore[call-overload]
            category=str(raw["category"]),
        )
        for raw in INITIAL_PRODUCTS
    ]


def _seed_members() -> list[Member]:
    return [
        Member(id=new_id(), name=raw["name"], email=raw.get("email"), phone=raw.get("phone"))
        for raw in INITIAL_MEMBERS
    ]


class BarState:
    """
    Owned state shared by the catalog, the member registry and the tab ledger.

    Every mutating operation runs inside ``lock`` and ends with ``commit`` for
    the slots it touched. A failed write is logged and remembered; the
    in-memory lists stay authoritative and the unsaved slots are retried on the
    next commit.
    """

    def __init__(
        self,
        store: DurableStore | None = None,
        products: list[Product] | None = None,
        members: list[Member] | None = None,
        tabs: list[Tab] | None = None,
    ) -> None:
        self.store = store
        self.products: list[Product] = products if products is not None else []
        self.members: list[Member] = members if members is not None else []
        self.tabs: list[Tab] = tabs if tabs is not None else []
        self.lock = threading.RLock()
        self.persist_warning: str | None = None
        self._unsaved: set[str] = set()

    @classmethod
    def load(cls, store: DurableStore, seed: bool = True) -> BarState:
        """Build state from the store, seeding slots that were never saved."""
        store.bootstrap_schema()
        raw_products = store.load(SLOT_PRODUCTS)
        raw_members = store.load(SLOT_MEMBERS)
        raw_tabs = store.load(SLOT_COMANDAS)

        if raw_products is None:
            products = _seed_products() if seed else []
        else:
            products = [Product.from_record(r) for r in raw_products]
        if raw_members is None:
            members = _seed_members() if seed else []
        else:
            members = [Member.from_record(r) for r in raw_members]
        tabs = [Tab.from_record(r) for r in raw_tabs] if raw_tabs is not None else []

        state = cls(store=store, products=products, members=members, tabs=tabs)
        logger.info(
            "state loaded products=%d members=%d tabs=%d from=%s",
            len(products),
            len(members),
            len(tabs),
            store.db_path,
        )
        if raw_products is None or raw_members is None or raw_tabs is None:
            state.commit(*SLOTS)
        return state

    def snapshot(self, slot: str) -> list[dict]:
        if slot == SLOT_PRODUCTS:
            return [p.to_record() for p in self.products]
        if slot == SLOT_MEMBERS:
            return [m.to_record() for m in self.members]
        if slot == SLOT_COMANDAS:
            return [t.to_record() for t in self.tabs]
        raise ValueError(f"Unknown slot {slot!r}")

    def commit(self, *slots: str) -> bool:
        """Persist the given slots plus any left over from a failed write."""
        with self.lock:
            pending = self._unsaved.union(slots)
            if self.store is None or not pending:
                return True
            try:
                self.store.save_many({slot: self.snapshot(slot) for slot in sorted(pending)})
            except PersistenceError as exc:
                self._unsaved = pending
                self.persist_warning = f"Changes not saved: {exc}"
                logger.warning("persist_failed slots=%s error=%s", sorted(pending), exc)
                return False
            self._unsaved.clear()
            self.persist_warning = None
            return True

    def flush(self) -> bool:
        """Retry any slots left unsaved by an earlier failure."""
        return self.commit()

    @property
    def unsaved_slots(self) -> frozenset[str]:
        return frozenset(self._unsaved)

    def find_product(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None
