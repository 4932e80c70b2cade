"""SQLite-backed durable store of named JSON slots."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from bartab.config import DB_PATH
from bartab.errors import PersistenceError

SLOT_PRODUCTS = "products"
SLOT_MEMBERS = "members"
SLOT_COMANDAS = "comandas"
SLOTS = (SLOT_PRODUCTS, SLOT_MEMBERS, SLOT_COMANDAS)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DurableStore:
    """Load and save JSON snapshots keyed by slot name."""

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the slot table if it does not already exist."""
        try:
            with closing(self._connect()) as conn, conn:
                conn.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS slots (
                        name TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Cannot prepare store at {self.db_path}: {exc}") from exc

    def load(self, slot: str) -> list[dict[str, Any]] | None:
        """Return the records saved under ``slot``, or None if it was never saved."""
        try:
            with closing(self._connect()) as conn, conn:
                row = conn.execute("SELECT payload FROM slots WHERE name = ?", (slot,)).fetchone()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Cannot read slot {slot!r}: {exc}") from exc
        if row is None:
            return None
        try:
            records = json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Slot {slot!r} holds invalid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise PersistenceError(f"Slot {slot!r} does not hold a list")
        return records

    def save(self, slot: str, records: list[dict[str, Any]]) -> None:
        self.save_many({slot: records})

    def save_many(self, snapshots: Mapping[str, list[dict[str, Any]]]) -> None:
        """Write several slots in a single transaction."""
        updated_at = _utc_now_iso()
        try:
            with closing(self._connect()) as conn, conn:
                for slot, records in snapshots.items():
                    conn.execute(
                        """
                        INSERT INTO slots (name, payload, updated_at) VALUES (?, ?, ?)
                        ON CONFLICT(name) DO UPDATE SET
                            payload = excluded.payload,
                            updated_at = excluded.updated_at
                        """,
                        (slot, json.dumps(records), updated_at),
                    )
        except (sqlite3.Error, OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Cannot write slots {sorted(snapshots)}: {exc}") from exc
