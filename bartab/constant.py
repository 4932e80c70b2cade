"""Editable seed data for a fresh store."""

from __future__ import annotations

from bartab.config import UNLIMITED_STOCK

INITIAL_PRODUCTS: list[dict[str, object]] = [
    {"name": "Pilsen Beer 600ml", "unit_price": "12.50", "stock": 48, "category": "Drinks"},
    {"name": "Classic Caipirinha", "unit_price": "18.00", "stock": UNLIMITED_STOCK, "category": "Cocktails"},
    {"name": "French Fries Portion", "unit_price": "35.00", "stock": 20, "category": "Snacks"},
]

INITIAL_MEMBERS: list[dict[str, str]] = [
    {"name": "John Silva", "email": "john@email.com", "phone": "11988887777"},
]

# Placeholder series shown on the dashboard; not derived from tab history.
WEEKLY_MOVEMENT_PLACEHOLDER: list[tuple[str, int]] = [
    ("Mon", 400),
    ("Tue", 300),
    ("Wed", 600),
    ("Thu", 800),
    ("Fri", 1500),
    ("Sat", 2000),
    ("Sun", 1200),
]
