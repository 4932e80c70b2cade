"""Holder picker modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from bartab.config import GUEST
from bartab.models import Member
from bartab.rendering import badge_style


class HolderModal(ModalScreen[str | None]):
    """Pick who the new tab is for: a guest or a registered member."""

    CSS = """
    HolderModal {
        align: center middle;
        background: $background 60%;
    }

    #holder-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #holder-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #holder-query {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #holder-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, members: list[Member]) -> None:
        super().__init__()
        self.members = members
        self.filter_text = ""
        self.cursor_index = 0

    def compose(self) -> ComposeResult:
        with Container(id="holder-dialog"):
            yield Static("Open Tab", id="holder-title")
            yield Static(id="holder-query")
            yield Static(id="holder-body")
            yield Static("Type to filter. ↑/↓ move. Enter open. Esc cancel.", id="holder-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def _rows(self) -> list[tuple[str, str]]:
        needle = self.filter_text.lower()
        rows = [(GUEST, "Guest")] if not needle or needle in "guest" else []
        rows.extend((m.id, m.name) for m in self.members if not needle or needle in m.name.lower())
        return rows

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(None)
        elif event.key == "enter":
            rows = self._rows()
            if rows:
                self.dismiss(rows[self.cursor_index][0])
        elif event.key in {"up", "down"}:
            rows = self._rows()
            if rows:
                delta = 1 if event.key == "down" else -1
                self.cursor_index = (self.cursor_index + delta) % len(rows)
                self._refresh_content()
        elif event.key == "backspace":
            self.filter_text = self.filter_text[:-1]
            self.cursor_index = 0
            self._refresh_content()
        elif event.is_printable and event.character:
            self.filter_text += event.character
            self.cursor_index = 0
            self._refresh_content()
        else:
            return
        event.stop()

    def _refresh_content(self) -> None:
        self.query_one("#holder-query", Static).update(Text(self.filter_text))
        body = self.query_one("#holder-body", Static)
        rows = self._rows()
        if not rows:
            body.update("No matching members")
            return
        if self.cursor_index >= len(rows):
            self.cursor_index = 0

        content = Text(style="white")
        for idx, (holder, name) in enumerate(rows):
            if idx > 0:
                content.append("\n")
            content.append("➤ " if idx == self.cursor_index else "  ")
            content.append("G" if holder == GUEST else "M", style=badge_style(holder))
            content.append(f" {name}")
        body.update(content)
