"""Wires the bar components around one shared state."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from bartab.catalog import CatalogManager
from bartab.config import DB_PATH
from bartab.ledger import TabLedger
from bartab.members import MemberRegistry
from bartab.persistence import DurableStore
from bartab.state import BarState
from bartab.stats import StatisticsAggregator, WeeklyMovementSource


@dataclass
class Bar:
    state: BarState
    catalog: CatalogManager
    members: MemberRegistry
    ledger: TabLedger
    stats: StatisticsAggregator

    @classmethod
    def from_state(cls, state: BarState, weekly_source: WeeklyMovementSource | None = None) -> Bar:
        catalog = CatalogManager(state)
        return cls(
            state=state,
            catalog=catalog,
            members=MemberRegistry(state),
            ledger=TabLedger(state, catalog),
            stats=StatisticsAggregator(state, weekly_source),
        )

    @classmethod
    def open(cls, db_path: str | Path = DB_PATH, seed: bool = True) -> Bar:
        """Load state from the SQLite store at ``db_path``."""
        return cls.from_state(BarState.load(DurableStore(db_path), seed=seed))
