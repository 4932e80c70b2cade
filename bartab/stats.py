"""Dashboard statistics derived from the current state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from bartab.config import LOW_STOCK_THRESHOLD
from bartab.constant import WEEKLY_MOVEMENT_PLACEHOLDER
from bartab.models import utc_now
from bartab.state import BarState


class WeeklyMovementSource(Protocol):
    def weekly_movement(self) -> list[tuple[str, int]]: ...


class StaticWeeklyMovement:
    """Serves the fixed placeholder series."""

    def __init__(self, series: list[tuple[str, int]] | None = None) -> None:
        self.series = list(series if series is not None else WEEKLY_MOVEMENT_PLACEHOLDER)

    def weekly_movement(self) -> list[tuple[str, int]]:
        return list(self.series)


@dataclass(frozen=True)
class DashboardStats:
    todays_revenue: Decimal
    open_tab_count: int
    total_revenue: Decimal
    low_stock_count: int
    category_breakdown: list[tuple[str, int]] = field(default_factory=list)
    weekly_movement: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "todays_revenue": str(self.todays_revenue),
            "open_tab_count": self.open_tab_count,
            "total_revenue": str(self.total_revenue),
            "low_stock_count": self.low_stock_count,
            "category_breakdown": [{"name": name, "value": count} for name, count in self.category_breakdown],
            "weekly_movement": [{"day": day, "value": value} for day, value in self.weekly_movement],
        }


class StatisticsAggregator:
    def __init__(
        self,
        state: BarState,
        weekly_source: WeeklyMovementSource | None = None,
        low_stock_threshold: int = LOW_STOCK_THRESHOLD,
    ) -> None:
        self.state = state
        self.weekly_source = weekly_source or StaticWeeklyMovement()
        self.low_stock_threshold = low_stock_threshold

    def summarize(self, now: datetime | None = None) -> DashboardStats:
        """
        Compute the dashboard numbers from one consistent view of the state.

        "Today" is the local calendar day of ``now``. Total revenue covers every
        closed tab still in history.
        """
        today = (now or utc_now()).astimezone().date()
        zero = Decimal("0.00")

        with self.state.lock:
            closed = [tab for tab in self.state.tabs if not tab.is_open]
            todays_revenue = sum(
                (tab.total for tab in closed if tab.closed_at and tab.closed_at.astimezone().date() == today),
                zero,
            )
            total_revenue = sum((tab.total for tab in closed), zero)
            open_tab_count = sum(1 for tab in self.state.tabs if tab.is_open)
            low_stock_count = sum(
                1 for p in self.state.products if not p.is_unlimited and p.stock < self.low_stock_threshold
            )
            categories: dict[str, int] = {}
            for product in self.state.products:
                categories[product.category] = categories.get(product.category, 0) + 1

        return DashboardStats(
            todays_revenue=todays_revenue,
            open_tab_count=open_tab_count,
            total_revenue=total_revenue,
            low_stock_count=low_stock_count,
            category_breakdown=list(categories.items()),
            weekly_movement=self.weekly_source.weekly_movement(),
        )
