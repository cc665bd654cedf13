"""Shared test fixtures for InfoBurst."""

import logging

import pytest
import structlog

from infoburst.models import Fact
from infoburst.shell import AppShell
from infoburst.store_memory import MemoryStore
from infoburst.votes import MemoryKV, VoteMemory


def make_fact(fid, text="A fact", category="history", created_at=None, love=0, interesting=0, false=0, source="https://example.com"):
    return Fact(
        id=fid,
        text=text,
        source=source,
        category=category,
        votes_love=love,
        votes_interesting=interesting,
        votes_false=false,
        created_at=created_at or f"2024-01-{fid:02d}T00:00:00+00:00",
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() calls made by CLI and settings tests."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)


@pytest.fixture
def store():
    """Memory store seeded with a few facts across categories."""
    s = MemoryStore()
    s.add(make_fact(1, "The sky is blue", category="news", love=2, interesting=0, false=5))
    s.add(make_fact(2, "Python was released in 1991", category="computer science"))
    s.add(make_fact(3, "Chess is older than football", category="games"))
    s.add(make_fact(4, "Rome was not built in a day", category="history"))
    s.add(make_fact(5, "Linux turned 30 in 2021", category="computer science"))
    return s


@pytest.fixture
def kv():
    return MemoryKV()


@pytest.fixture
def votes(kv):
    return VoteMemory(kv)


@pytest.fixture
def shell(store, votes):
    return AppShell(store=store, votes=votes)
