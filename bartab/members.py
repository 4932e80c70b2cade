"""Member registry."""

from __future__ import annotations

import logging
from dataclasses import fields, replace
from typing import Any

from bartab.models import Member, new_id, to_money, utc_now
from bartab.persistence import SLOT_MEMBERS
from bartab.state import BarState

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {f.name for f in fields(Member)} - {"id", "registered_at"}


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class MemberRegistry:
    """Owns the member list. Members are never deleted."""

    def __init__(self, state: BarState) -> None:
        self.state = state

    def get(self, member_id: str) -> Member | None:
        with self.state.lock:
            for member in self.state.members:
                if member.id == member_id:
                    return replace(member)
        return None

    def list(self) -> list[Member]:
        with self.state.lock:
            return [replace(m) for m in self.state.members]

    def search(self, term: str) -> list[Member]:
        """Match name, email or phone, case-insensitively."""
        needle = term.strip().lower()
        with self.state.lock:
            return [
                replace(m)
                for m in self.state.members
                if not needle
                or needle in m.name.lower()
                or needle in (m.email or "").lower()
                or needle in (m.phone or "")
            ]

    def create(self, name: str, email: str | None = None, phone: str | None = None) -> Member:
        name = name.strip()
        if not name:
            raise ValueError("Member name is required")
        member = Member(id=new_id(), name=name, email=_clean(email), phone=_clean(phone), registered_at=utc_now())
        with self.state.lock:
            self.state.members.append(member)
            self.state.commit(SLOT_MEMBERS)
        logger.info("member_created id=%s", member.id)
        return replace(member)

    def update(self, member_id: str, **changes: Any) -> None:
        """Merge ``changes`` into the member; no-op if the id is unknown."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update member fields: {sorted(unknown)}")
        if "name" in changes:
            changes["name"] = str(changes["name"]).strip()
            if not changes["name"]:
                raise ValueError("Member name is required")
        for key in ("email", "phone"):
            if key in changes:
                changes[key] = _clean(changes[key])
        if "balance" in changes:
            changes["balance"] = to_money(changes["balance"])

        with self.state.lock:
            for idx, member in enumerate(self.state.members):
                if member.id == member_id:
                    self.state.members[idx] = replace(member, **changes)
                    self.state.commit(SLOT_MEMBERS)
                    return
        logger.debug("member_update_ignored id=%s reason=not_found", member_id)
