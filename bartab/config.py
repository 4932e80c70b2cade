"""Runtime configuration defaults for persistence, logging and insights."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("BARTAB_DB_PATH", "data/bartab.db")
DEBUG_LOG_PATH = os.environ.get("BARTAB_DEBUG_LOG", "/tmp/bartab-debug.log")

# Holder marker for walk-up customers without a member record.
GUEST = "guest"

# Stock sentinel for made-to-order products. Outside the valid finite range.
UNLIMITED_STOCK = -1
LOW_STOCK_THRESHOLD = 10

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
INSIGHT_MODEL = os.environ.get("BARTAB_INSIGHT_MODEL", "gemini-2.0-flash")
try:
    INSIGHT_TIMEOUT_SECONDS = float(os.environ.get("BARTAB_INSIGHT_TIMEOUT", "10"))
except ValueError:
    INSIGHT_TIMEOUT_SECONDS = 10.0
