from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from .models import Fact, StoreError, VOTE_OPTIONS
from .votes import VoteRecord

if TYPE_CHECKING:
    from .shell import AppShell

logger = structlog.get_logger()


def next_counters(fact: Fact, previous: str | None, option: str) -> dict[str, int]:
    """Counters after moving a vote from ``previous`` (if any) to ``option``."""
    counters = fact.counters()
    if previous is not None:
        counters[previous] -= 1
    counters[option] += 1
    return counters


@dataclass
class FactRow:
    """Vote handling for one rendered fact: idle until a vote is in flight."""

    fact_id: Any
    is_voting: bool = False

    def record(self, shell: "AppShell") -> VoteRecord:
        return shell.votes.get(self.fact_id)

    def button_disabled(self, shell: "AppShell", option: str) -> bool:
        return self.is_voting or self.record(shell).is_chosen(option)

    async def vote(self, option: str, shell: "AppShell") -> Fact | None:
        if option not in VOTE_OPTIONS:
            raise ValueError(f"unknown vote option: {option}")

        voted = self.record(shell)
        if self.is_voting or voted.is_chosen(option):
            return None

        fact = shell.find_fact(self.fact_id)
        if fact is None:
            raise KeyError(self.fact_id)

        counters = next_counters(fact, voted.chosen(), option)
        self.is_voting = True
        try:
            updated = await shell.store.update_vote_counts(self.fact_id, counters)
        except StoreError as exc:
            logger.warning("vote.failed", fact_id=str(self.fact_id), option=option, error=str(exc))
            return None
        finally:
            self.is_voting = False

        shell.replace_fact(updated)
        shell.votes.set(self.fact_id, VoteRecord.only(option))
        logger.info("vote.cast", fact_id=str(self.fact_id), option=option, previous=voted.chosen())
        return updated
