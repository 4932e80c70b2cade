"""Rendering helpers for tabs, products and stats."""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from rich.text import Text

from bartab.config import GUEST, LOW_STOCK_THRESHOLD
from bartab.models import Member, Product, Tab
from bartab.stats import DashboardStats

MEMBER_REMOVED_LABEL = "member removed"


def format_money(value: Decimal) -> str:
    return f"{value:,.2f}"


def stock_label(product: Product) -> str:
    if product.is_unlimited:
        return "∞"
    return str(product.stock)


def badge_style(holder: str) -> str:
    """Return a consistent badge style for guest and member tabs."""
    if holder == GUEST:
        return "bold #0b1f0f on #5fbf72"
    return "bold #ffffff on #2f6db5"


def holder_label(holder: str, members: Mapping[str, Member]) -> str:
    if holder == GUEST:
        return "Guest"
    member = members.get(holder)
    if member is None:
        return MEMBER_REMOVED_LABEL
    return member.name


def format_tab_label(tab: Tab, members: Mapping[str, Member]) -> Text:
    """Render a tab row with a holder badge and its running total."""
    text = Text()
    text.append("G" if tab.holder == GUEST else "M", style=badge_style(tab.holder))
    text.append(f" {holder_label(tab.holder, members)}")
    text.append(f"  {format_money(tab.total)}", style="bold")
    return text


def format_line_items(tab: Tab) -> Text:
    text = Text()
    if not tab.items:
        text.append("(no items yet)", style="dim")
        return text
    for idx, item in enumerate(tab.items):
        if idx > 0:
            text.append("\n")
        text.append(f"{item.quantity}x {item.product_name}")
        text.append(f"  {format_money(item.line_total)}", style="white")
    return text


def format_product_row(product: Product) -> Text:
    text = Text()
    text.append(product.name)
    text.append(f"  {format_money(product.unit_price)}", style="bold")
    low = not product.is_unlimited and product.stock < LOW_STOCK_THRESHOLD
    text.append(f"  [{stock_label(product)}]", style="bold #ffb3b3" if low else "dim")
    return text


def format_stats_bar(stats: DashboardStats) -> Text:
    text = Text()
    text.append(f"Today {format_money(stats.todays_revenue)}")
    text.append(f"  Open tabs {stats.open_tab_count}")
    text.append(f"  Revenue {format_money(stats.total_revenue)}")
    if stats.low_stock_count:
        text.append(f"  Low stock {stats.low_stock_count}", style="bold #ffb3b3")
    return text
