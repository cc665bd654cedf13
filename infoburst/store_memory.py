from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
import itertools

from .models import DEFAULT_LIST_LIMIT, Fact, StoreError, VOTE_OPTIONS


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class MemoryStore:
    """Tiny in-memory fact store.

    This exists so the app works locally without a remote database.
    Data is NOT persisted. Set ``fail_with`` to make every call raise.
    """

    facts: dict[int, Fact] = field(default_factory=dict)
    fail_with: str | None = None
    _ids: Any = field(default_factory=lambda: itertools.count(1), repr=False)

    def ensure_schema(self) -> None:
        return

    def _check(self) -> None:
        if self.fail_with:
            raise StoreError(self.fail_with)

    def add(self, fact: Fact) -> Fact:
        """Seed a fact as-is (tests and demos)."""
        if fact.created_at is None:
            fact.created_at = _now_iso()
        self.facts[fact.id] = fact
        return fact

    async def list_facts(self, category: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[Fact]:
        self._check()
        # newest insertion first on equal timestamps (sort is stable)
        items = [f for f in reversed(list(self.facts.values())) if category is None or f.category == category]
        items.sort(key=lambda f: f.created_at or "", reverse=True)
        return [Fact(**vars(f)) for f in items[:limit]]

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        self._check()
        fid = next(self._ids)
        while fid in self.facts:
            fid = next(self._ids)
        fact = Fact(id=fid, text=text, source=source, category=category, created_at=_now_iso())
        self.facts[fid] = fact
        return Fact(**vars(fact))

    async def update_vote_counts(self, fact_id: Any, counters: dict[str, int]) -> Fact:
        self._check()
        fact = self.facts.get(fact_id)
        if fact is None:
            raise StoreError(f"no fact with id {fact_id!r}")
        for opt, attr in VOTE_OPTIONS.items():
            if opt in counters:
                setattr(fact, attr, int(counters[opt]))
        return Fact(**vars(fact))

    async def close(self) -> None:
        return
