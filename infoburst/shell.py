from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from .categories import ALL, is_known
from .fact_row import FactRow
from .form import NewFactForm
from .models import DEFAULT_LIST_LIMIT, Fact, FactStore, StoreError
from .votes import VoteMemory

logger = structlog.get_logger()

LIST_FAILED_ALERT = "problem"


@dataclass
class AppShell:
    """Owns the UI state: the fact list, filter, loading flag, form and rows.

    The fact list is reloaded only when the category changes; votes and new
    facts patch it in place.
    """

    store: FactStore
    votes: VoteMemory
    list_limit: int = DEFAULT_LIST_LIMIT
    facts: list[Fact] = field(default_factory=list)
    is_loading: bool = False
    current_category: str = ALL
    show_form: bool = False
    form: NewFactForm = field(default_factory=NewFactForm)
    rows: dict[Any, FactRow] = field(default_factory=dict)
    alerts: list[str] = field(default_factory=list)
    _generation: int = 0

    async def start(self) -> None:
        await self.refresh()

    async def set_category(self, name: str) -> None:
        if not is_known(name):
            raise ValueError(f"unknown category: {name}")
        if name == self.current_category:
            return
        self.current_category = name
        await self.refresh()

    async def refresh(self) -> None:
        # A response is applied only if no newer refetch started meanwhile.
        self._generation += 1
        generation = self._generation
        category = None if self.current_category == ALL else self.current_category

        self.is_loading = True
        try:
            facts = await self.store.list_facts(category, limit=self.list_limit)
        except StoreError as exc:
            if generation == self._generation:
                logger.warning("shell.list_failed", category=self.current_category, error=str(exc))
                self.alerts.append(LIST_FAILED_ALERT)
                self.is_loading = False
            else:
                logger.info("shell.stale_response", generation=generation, latest=self._generation)
            return

        if generation != self._generation:
            logger.info("shell.stale_response", generation=generation, latest=self._generation)
            return
        self.facts = facts
        self.is_loading = False
        logger.debug("shell.loaded", category=self.current_category, count=len(facts))

    def toggle_form(self) -> bool:
        self.show_form = not self.show_form
        return self.show_form

    def find_fact(self, fact_id: Any) -> Fact | None:
        # ids arriving from URLs are strings
        for f in self.facts:
            if f.id == fact_id or str(f.id) == str(fact_id):
                return f
        return None

    def prepend_fact(self, fact: Fact) -> None:
        self.facts = [fact, *self.facts]

    def replace_fact(self, fact: Fact) -> None:
        self.facts = [fact if f.id == fact.id else f for f in self.facts]

    def row(self, fact: Fact) -> FactRow:
        r = self.rows.get(fact.id)
        if r is None:
            self.votes.ensure(fact.id)
            r = self.rows[fact.id] = FactRow(fact_id=fact.id)
        return r

    def rows_for(self, facts: list[Fact]) -> list[FactRow]:
        # defaults for every newly shown fact go to vote memory in one write
        self.votes.ensure_all(f.id for f in facts if f.id not in self.rows)
        return [self.row(f) for f in facts]

    async def vote(self, fact_id: Any, option: str) -> Fact | None:
        fact = self.find_fact(fact_id)
        if fact is None:
            raise KeyError(fact_id)
        return await self.row(fact).vote(option, self)

    def drain_alerts(self) -> list[str]:
        out, self.alerts = self.alerts, []
        return out

    def snapshot(self) -> dict:
        facts = []
        for f, row in zip(self.facts, self.rows_for(self.facts)):
            facts.append({
                **f.to_row(),
                "disputed": f.disputed,
                "voting": row.is_voting,
                "voted": row.record(self).to_dict(),
            })
        return {
            "facts": facts,
            "isLoading": self.is_loading,
            "currentCategory": self.current_category,
            "showForm": self.show_form,
            "form": {
                "text": self.form.text,
                "source": self.form.source,
                "category": self.form.category,
                "remaining": self.form.remaining,
                "isUploading": self.form.is_uploading,
                "isValidUrl": self.form.is_valid_url,
            },
        }
