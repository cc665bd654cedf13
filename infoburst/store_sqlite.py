from __future__ import annotations

import asyncio
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from .models import DEFAULT_LIST_LIMIT, Fact, StoreError, VOTE_OPTIONS
from .settings import Settings

logger = structlog.get_logger()


SCHEMA = """
CREATE TABLE IF NOT EXISTS facts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  text TEXT NOT NULL,
  source TEXT NOT NULL,
  category TEXT NOT NULL,
  votesLove INTEGER NOT NULL DEFAULT 0,
  votesInteresting INTEGER NOT NULL DEFAULT 0,
  votesFalse INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_facts_category ON facts(category);
CREATE INDEX IF NOT EXISTS idx_facts_created_at ON facts(created_at);
"""

COLUMNS = "id,text,source,category,votesLove,votesInteresting,votesFalse,created_at"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SQLiteStore:
    """Persistent local fact store (no remote database required)."""

    settings: Settings

    def _db_path(self) -> str:
        return os.path.expanduser(self.settings.sqlite_path)

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self._db_path())
        con.row_factory = sqlite3.Row
        con.execute("PRAGMA journal_mode=WAL")
        con.execute("PRAGMA synchronous=NORMAL")
        return con

    def ensure_schema(self) -> None:
        con = self._connect()
        try:
            with con:
                con.executescript(SCHEMA)
        finally:
            con.close()

    def _run(self, fn, *args):
        try:
            con = self._connect()
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite: {exc}") from exc
        try:
            with con:
                con.executescript(SCHEMA)
                return fn(con, *args)
        except sqlite3.Error as exc:
            raise StoreError(f"sqlite: {exc}") from exc
        finally:
            con.close()

    @staticmethod
    def _select(con: sqlite3.Connection, category: str | None, limit: int) -> list[Fact]:
        q = f"SELECT {COLUMNS} FROM facts"
        params: list[Any] = []
        if category is not None:
            q += " WHERE category = ?"
            params.append(category)
        q += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)
        return [Fact.from_row(dict(r)) for r in con.execute(q, params).fetchall()]

    @staticmethod
    def _insert(con: sqlite3.Connection, text: str, source: str, category: str) -> Fact:
        cur = con.execute(
            "INSERT INTO facts(text,source,category,created_at) VALUES(?,?,?,?)",
            (text, source, category, _now_iso()),
        )
        row = con.execute(f"SELECT {COLUMNS} FROM facts WHERE id = ?", (cur.lastrowid,)).fetchone()
        return Fact.from_row(dict(row))

    @staticmethod
    def _update(con: sqlite3.Connection, fact_id: Any, counters: dict[str, int]) -> Fact:
        cols = [opt for opt in VOTE_OPTIONS if opt in counters]
        if cols:
            assignments = ", ".join(f"{c} = ?" for c in cols)
            con.execute(
                f"UPDATE facts SET {assignments} WHERE id = ?",
                [int(counters[c]) for c in cols] + [fact_id],
            )
        row = con.execute(f"SELECT {COLUMNS} FROM facts WHERE id = ?", (fact_id,)).fetchone()
        if row is None:
            raise StoreError(f"no fact with id {fact_id!r}")
        return Fact.from_row(dict(row))

    async def list_facts(self, category: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> list[Fact]:
        facts = await asyncio.to_thread(self._run, self._select, category, limit)
        logger.debug("store.listed", backend="sqlite", category=category, count=len(facts))
        return facts

    async def insert_fact(self, text: str, source: str, category: str) -> Fact:
        return await asyncio.to_thread(self._run, self._insert, text, source, category)

    async def update_vote_counts(self, fact_id: Any, counters: dict[str, int]) -> Fact:
        return await asyncio.to_thread(self._run, self._update, fact_id, counters)

    async def close(self) -> None:
        return
