"""Domain models for bartab."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import uuid4

from bartab.config import GUEST, UNLIMITED_STOCK

CENTS = Decimal("0.01")


def new_id() -> str:
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value: Any) -> Decimal:
    """Coerce a number or numeric string to a 2-place Decimal."""
    if isinstance(value, float):
        value = repr(value)
    try:
        return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Not a money amount: {value!r}") from exc


def _parse_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TabStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Product:
    """A sellable catalog item."""

    id: str
    name: str
    unit_price: Decimal
    stock: int
    category: str

    @property
    def is_unlimited(self) -> bool:
        return self.stock == UNLIMITED_STOCK

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": str(self.unit_price),
            "stock": self.stock,
            "category": self.category,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Product:
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            unit_price=to_money(record["unit_price"]),
            stock=int(record["stock"]),
            category=str(record.get("category", "")),
        )


@dataclass
class Member:
    """A registered customer."""

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    balance: Decimal = Decimal("0.00")
    registered_at: datetime = field(default_factory=utc_now)

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "balance": str(self.balance),
            "registered_at": self.registered_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Member:
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            email=record.get("email") or None,
            phone=record.get("phone") or None,
            balance=to_money(record.get("balance", 0)),
            registered_at=_parse_ts(record["registered_at"]) or utc_now(),
        )


@dataclass(frozen=True)
class LineItem:
    """One consumption event on a tab, with name and price frozen at sale time."""

    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    timestamp: datetime

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "line_total": str(self.line_total),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> LineItem:
        return cls(
            id=str(record["id"]),
            product_id=str(record["product_id"]),
            product_name=str(record["product_name"]),
            quantity=int(record["quantity"]),
            unit_price=to_money(record["unit_price"]),
            line_total=to_money(record["line_total"]),
            timestamp=_parse_ts(record["timestamp"]) or utc_now(),
        )


@dataclass
class Tab:
    """A running account (comanda) for one holder."""

    id: str
    holder: str
    items: list[LineItem] = field(default_factory=list)
    status: TabStatus = TabStatus.OPEN
    total: Decimal = Decimal("0.00")
    opened_at: datetime = field(default_factory=utc_now)
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status is TabStatus.OPEN

    @property
    def is_guest(self) -> bool:
        return self.holder == GUEST

    def recompute_total(self) -> None:
        self.total = sum((item.line_total for item in self.items), Decimal("0.00"))

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "holder": self.holder,
            "items": [item.to_record() for item in self.items],
            "status": self.status.value,
            "total": str(self.total),
            "opened_at": self.opened_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Tab:
        tab = cls(
            id=str(record["id"]),
            holder=str(record["holder"]),
            items=[LineItem.from_record(item) for item in record.get("items", [])],
            status=TabStatus(record.get("status", TabStatus.OPEN.value)),
            opened_at=_parse_ts(record["opened_at"]) or utc_now(),
            closed_at=_parse_ts(record.get("closed_at")),
        )
        # The stored total is a cache; the line items are authoritative.
        tab.recompute_total()
        return tab
