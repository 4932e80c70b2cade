"""Entry point for the bartab Textual app."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from bartab.bar import Bar
from bartab.config import DB_PATH, DEBUG_LOG_PATH, GEMINI_API_KEY
from bartab.insights import GeminiInsightProvider
from bartab.tab_app import BarTabApp


def configure_logging(log_path: str = DEBUG_LOG_PATH, level: int = logging.DEBUG) -> None:
    """Send logs to a file; the terminal belongs to the TUI."""
    try:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Logging must never interfere with app flow.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger("bartab")
    root.setLevel(level)
    root.addHandler(handler)


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    parser = argparse.ArgumentParser(description="Bar tab and stock manager")
    parser.add_argument("--db", default=DB_PATH, help="SQLite store path")
    parser.add_argument("--no-seed", action="store_true", help="Start an empty store without sample data")
    args = parser.parse_args(argv)

    configure_logging()
    provider = GeminiInsightProvider() if GEMINI_API_KEY else None
    BarTabApp(Bar.open(args.db, seed=not args.no_seed), insight_provider=provider).run()


if __name__ == "__main__":
    main()
