from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol

VoteOption = Literal["votesLove", "votesInteresting", "votesFalse"]

# Store column name -> Fact attribute. The column names double as vote option ids.
VOTE_OPTIONS: dict[str, str] = {
    "votesLove": "votes_love",
    "votesInteresting": "votes_interesting",
    "votesFalse": "votes_false",
}

MAX_TEXT_LENGTH = 200
DEFAULT_LIST_LIMIT = 5000


class StoreError(RuntimeError):
    """Any transport, query, or constraint failure reported by a fact store."""


def is_disputed(votes_love: int, votes_interesting: int, votes_false: int) -> bool:
    return votes_love + votes_interesting < votes_false


@dataclass
class Fact:
    id: Any
    text: str
    source: str
    category: str
    votes_love: int = 0
    votes_interesting: int = 0
    votes_false: int = 0
    created_at: str | None = None

    @property
    def disputed(self) -> bool:
        return is_disputed(self.votes_love, self.votes_interesting, self.votes_false)

    def count(self, option: str) -> int:
        return getattr(self, VOTE_OPTIONS[option])

    def counters(self) -> dict[str, int]:
        return {opt: self.count(opt) for opt in VOTE_OPTIONS}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Fact":
        try:
            return cls(
                id=row["id"],
                text=row.get("text") or "",
                source=row.get("source") or "",
                category=row.get("category") or "",
                votes_love=int(row.get("votesLove") or 0),
                votes_interesting=int(row.get("votesInteresting") or 0),
                votes_false=int(row.get("votesFalse") or 0),
                created_at=row.get("created_at"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"malformed fact row: {row!r}") from exc

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "source": self.source,
            "category": self.category,
            **self.counters(),
            "created_at": self.created_at,
        }


class FactStore(Protocol):
    """Operations the application consumes from the "facts" collection."""

    def ensure_schema(self) -> None: ...

    async def list_facts(self, category: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[Fact]: ...

    async def insert_fact(self, text: str, source: str, category: str) -> Fact: ...

    async def update_vote_counts(self, fact_id: Any, counters: dict[str, int]) -> Fact: ...

    async def close(self) -> None: ...
