"""Main Textual app class."""

from __future__ import annotations

import logging

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.widgets import Header, Static

from bartab.bar import Bar
from bartab.errors import LedgerRejection
from bartab.holder_modal import HolderModal
from bartab.insights import InsightProvider, business_insights
from bartab.models import Product, Tab
from bartab.rendering import format_line_items, format_product_row, format_stats_bar, format_tab_label

logger = logging.getLogger(__name__)


class BarTabApp(App):
    """A Textual app for running member and guest tabs at the bar."""

    TITLE = "Bar Tabs"
    SUB_TITLE = "Comandas"

    CSS = """
    Screen {
        layout: vertical;
    }

    #stats-bar {
        height: 1;
        padding: 0 1;
    }

    #main-layout {
        height: 1fr;
    }

    #tabs-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #tabs-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #tab-detail {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_text = reactive("")
    selected_index = reactive(0)
    tab_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "cycle_results(-1)", "Previous result"),
        ("down", "cycle_results(1)", "Next result"),
        ("enter", "record_selected", "Add to tab"),
        ("backspace", "backspace_search", "Delete search char"),
        ("escape", "cancel_active_mode", "Exit search"),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, bar: Bar, insight_provider: InsightProvider | None = None) -> None:
        super().__init__()
        self.bar = bar
        self.insight_provider = insight_provider
        self.system_status = ""

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="stats-bar")
        with Horizontal(id="main-layout"):
            with Vertical(id="tabs-pane"):
                yield Static("Open Tabs", classes="pane-title")
                yield Static("(no open tabs)", id="tabs-list")
                yield Static(id="tab-detail")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        logger.debug("on_mount products=%d", len(self.bar.state.products))
        self._refresh_all()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, HolderModal):
            return
        if not event.is_printable or not event.character:
            return

        if self.input_state == "active":
            self.search_text += event.character
            self.selected_index = 0
            self._refresh_search()
            event.stop()
            return

        key = event.character.lower()
        handlers = {
            "o": self._open_tab_picker,
            "j": lambda: self._move_tab_selection(1),
            "k": lambda: self._move_tab_selection(-1),
            "d": self._remove_last_item,
            "c": self._close_selected_tab,
            "g": self._enter_search,
            "i": self._show_insights,
        }
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, HolderModal):
            return
        if self.input_state == "normal":
            return
        self.input_state = "normal"
        self.search_text = ""
        self.selected_index = 0
        self._refresh_search()

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, HolderModal):
            return
        if self.input_state != "active":
            return
        results = self._filtered_results()
        if results:
            self.selected_index = (self.selected_index + delta) % len(results)
        else:
            self.selected_index = 0
        self._refresh_results(results)

    def action_backspace_search(self) -> None:
        if isinstance(self.screen, HolderModal):
            return
        if self.input_state != "active" or not self.search_text:
            return
        self.search_text = self.search_text[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_record_selected(self) -> None:
        if isinstance(self.screen, HolderModal):
            return
        if self.input_state != "active":
            return
        tab = self._selected_tab()
        if tab is None:
            self._set_status("Select or open a tab first (O)")
            return
        results = self._filtered_results()
        if not results:
            return

        product = results[self.selected_index]
        try:
            self.bar.ledger.record_consumption(tab.holder, product.id, 1, tab_id=tab.id)
        except LedgerRejection as exc:
            self._set_status(str(exc))
            return
        self._set_status(f"Added {product.name}")
        self._refresh_all()

    def _enter_search(self) -> None:
        self.input_state = "active"
        self.search_text = ""
        self.selected_index = 0
        self._refresh_search()

    def _open_tab_picker(self) -> None:
        self.push_screen(HolderModal(self.bar.members.list()), callback=self._open_tab_for)

    def _open_tab_for(self, holder: str | None) -> None:
        if holder is None:
            return
        try:
            tab_id = self.bar.ledger.open_tab(holder)
        except LedgerRejection as exc:
            self._set_status(str(exc))
            return
        tabs = self.bar.ledger.list_open()
        self.tab_selected_index = next((i for i, t in enumerate(tabs) if t.id == tab_id), None)
        self._set_status("Tab opened")
        self._refresh_all()

    def _remove_last_item(self) -> None:
        tab = self._selected_tab()
        if tab is None or not tab.items:
            return
        self.bar.ledger.remove_line_item(tab.id, tab.items[-1].id)
        self._set_status(f"Removed {tab.items[-1].product_name}")
        self._refresh_all()

    def _close_selected_tab(self) -> None:
        tab = self._selected_tab()
        if tab is None:
            return
        self.bar.ledger.close_tab(tab.id)
        self._set_status(f"Closed tab, total {tab.total:.2f}")
        self._refresh_all()

    def _show_insights(self) -> None:
        self._set_status(business_insights(self.bar.stats.summarize(), self.insight_provider))
        self._refresh_search()

    def _set_status(self, message: str) -> None:
        self.system_status = message
        logger.debug("status %s", message)

    def _filtered_results(self) -> list[Product]:
        return self.bar.catalog.search(self.search_text)

    def _selected_tab(self) -> Tab | None:
        tabs = self.bar.ledger.list_open()
        if self.tab_selected_index is None or not (0 <= self.tab_selected_index < len(tabs)):
            return None
        return tabs[self.tab_selected_index]

    def _move_tab_selection(self, delta: int) -> None:
        tabs = self.bar.ledger.list_open()
        if not tabs:
            return
        if self.tab_selected_index is None:
            self.tab_selected_index = 0 if delta > 0 else len(tabs) - 1
        else:
            self.tab_selected_index = (self.tab_selected_index + delta) % len(tabs)
        self._refresh_tabs()

    def _refresh_all(self) -> None:
        self._refresh_stats()
        self._refresh_tabs()
        self._refresh_search()

    def _refresh_stats(self) -> None:
        try:
            bar_widget = self.query_one("#stats-bar", Static)
        except NoMatches:
            return
        bar_widget.update(format_stats_bar(self.bar.stats.summarize()))

    def _refresh_tabs(self) -> None:
        try:
            tabs_widget = self.query_one("#tabs-list", Static)
            detail_widget = self.query_one("#tab-detail", Static)
        except NoMatches:
            return
        tabs = self.bar.ledger.list_open()
        if not tabs:
            self.tab_selected_index = None
            tabs_widget.update("(no open tabs)")
            detail_widget.update("")
            return
        if self.tab_selected_index is not None and self.tab_selected_index >= len(tabs):
            self.tab_selected_index = len(tabs) - 1

        members = {m.id: m for m in self.bar.members.list()}
        lines = Text()
        for idx, tab in enumerate(tabs):
            if idx > 0:
                lines.append("\n")
            lines.append("➤ " if idx == self.tab_selected_index else "  ")
            lines.append_text(format_tab_label(tab, members))
        tabs_widget.update(lines)

        selected = self._selected_tab()
        detail_widget.update(format_line_items(selected) if selected is not None else "")

    def _refresh_search(self) -> None:
        bar = self.query_one("#search-bar", Static)
        results = self.query_one("#results", Static)
        status = self.bar.state.persist_warning or self.system_status or "Ready"

        if self.input_state == "normal":
            bar.update(Text(f"O open tab, J/K select, G search products, D undo item, C close, I insights.\n{status}"))
            results.update("")
            return

        bar.update(Text(f"Search: {self.search_text}\n{status}"))
        self._refresh_results(self._filtered_results())

    def _refresh_results(self, products: list[Product]) -> None:
        results_widget = self.query_one("#results", Static)
        if not products:
            results_widget.update("No results")
            return
        if self.selected_index >= len(products):
            self.selected_index = 0

        lines = Text()
        for idx, product in enumerate(products):
            if idx > 0:
                lines.append("\n")
            lines.append("➤ " if idx == self.selected_index else "  ")
            lines.append_text(format_product_row(product))
        results_widget.update(lines)
