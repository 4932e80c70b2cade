from __future__ import annotations

import sqlite3
from decimal import Decimal

import pytest

from bartab.bar import Bar
from bartab.config import GUEST
from bartab.errors import PersistenceError
from bartab.models import TabStatus
from bartab.persistence import SLOT_COMANDAS, SLOT_PRODUCTS, DurableStore


def test_store_round_trips_slots(tmp_path):
    store = DurableStore(tmp_path / "nested" / "bar.db")
    store.bootstrap_schema()

    assert store.load(SLOT_PRODUCTS) is None
    store.save_many({SLOT_PRODUCTS: [{"id": "1"}], SLOT_COMANDAS: []})

    assert store.load(SLOT_PRODUCTS) == [{"id": "1"}]
    assert store.load(SLOT_COMANDAS) == []


def test_corrupt_slot_raises(tmp_path):
    store = DurableStore(tmp_path / "bar.db")
    store.bootstrap_schema()
    with sqlite3.connect(store.db_path) as conn:
        conn.execute("INSERT INTO slots (name, payload, updated_at) VALUES ('products', '{oops', 'x')")

    with pytest.raises(PersistenceError):
        store.load(SLOT_PRODUCTS)


def test_fresh_store_is_seeded(tmp_path):
    bar = Bar.open(tmp_path / "bar.db")

    assert len(bar.catalog.list()) == 3
    assert len(bar.members.list()) == 1
    assert bar.ledger.list_open() == []

    reopened = Bar.open(tmp_path / "bar.db")
    assert [p.id for p in reopened.catalog.list()] == [p.id for p in bar.catalog.list()]


def test_state_survives_restart(tmp_path):
    db_path = tmp_path / "bar.db"
    bar = Bar.open(db_path, seed=False)
    beer = bar.catalog.create("Beer", "12.50", 10, "Drinks")
    member = bar.members.create("Ana")
    bar.ledger.record_consumption(member.id, beer.id, 2)
    guest_tab = bar.ledger.open_tab(GUEST)
    bar.ledger.record_consumption(GUEST, beer.id)
    bar.ledger.close_tab(guest_tab)

    reopened = Bar.open(db_path, seed=False)

    assert reopened.catalog.get(beer.id).stock == 7
    member_tab = reopened.ledger.open_tab_for(member.id)
    assert member_tab.total == Decimal("25.00")
    assert member_tab.items[0].product_name == "Beer"
    closed = reopened.ledger.get(guest_tab)
    assert closed.status is TabStatus.CLOSED
    assert closed.closed_at is not None
    assert reopened.members.get(member.id).registered_at == member.registered_at


class _FlakyStore(DurableStore):
    def __init__(self, db_path):
        super().__init__(db_path)
        self.fail = False
        self.saved: list[list[str]] = []

    def save_many(self, snapshots):
        if self.fail:
            raise PersistenceError("disk full")
        self.saved.append(sorted(snapshots))
        super().save_many(snapshots)


def test_failed_write_keeps_memory_and_retries(tmp_path):
    store = _FlakyStore(tmp_path / "bar.db")
    bar = Bar.open(tmp_path / "bar.db", seed=False)
    bar.state.store = store
    beer = bar.catalog.create("Beer", "12.50", 10, "Drinks")

    store.fail = True
    bar.ledger.record_consumption(GUEST, beer.id, 2)

    assert bar.catalog.get(beer.id).stock == 8
    assert bar.state.persist_warning is not None
    assert bar.state.unsaved_slots == {SLOT_COMANDAS, SLOT_PRODUCTS}

    store.fail = False
    assert bar.state.flush() is True
    assert bar.state.persist_warning is None
    assert bar.state.unsaved_slots == frozenset()

    reopened = Bar.open(tmp_path / "bar.db", seed=False)
    assert reopened.catalog.get(beer.id).stock == 8
    assert len(reopened.ledger.list_open()) == 1


def test_unwritable_path_raises_persistence_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = DurableStore(blocker / "bar.db")

    with pytest.raises(PersistenceError):
        store.bootstrap_schema()


def test_store_closes_every_connection(tmp_path, monkeypatch):
    store = DurableStore(tmp_path / "bar.db")
    opened = []
    connect = store._connect

    def tracking_connect():
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", tracking_connect)

    store.bootstrap_schema()
    store.save_many({SLOT_PRODUCTS: [{"id": "p1"}], SLOT_COMANDAS: []})
    assert store.load(SLOT_PRODUCTS) == [{"id": "p1"}]

    assert len(opened) == 3
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
