"""Tests for vote casting on a fact row."""

from unittest.mock import AsyncMock

import pytest

from infoburst.fact_row import FactRow, next_counters
from infoburst.models import Fact, StoreError
from infoburst.votes import VoteRecord


def test_next_counters_first_vote():
    fact = Fact(id=1, text="t", source="s", category="c", votes_love=2, votes_false=5)
    assert next_counters(fact, None, "votesInteresting") == {"votesLove": 2, "votesInteresting": 1, "votesFalse": 5}


def test_next_counters_moves_vote():
    fact = Fact(id=1, text="t", source="s", category="c", votes_love=3, votes_false=1)
    assert next_counters(fact, "votesLove", "votesFalse") == {"votesLove": 2, "votesInteresting": 0, "votesFalse": 2}


@pytest.mark.asyncio
async def test_first_vote_increments_one_counter(shell, votes):
    await shell.start()

    updated = await shell.vote(2, "votesLove")

    assert updated.counters() == {"votesLove": 1, "votesInteresting": 0, "votesFalse": 0}
    assert shell.find_fact(2).votes_love == 1
    assert votes.get(2).to_dict() == {"votesLove": True, "votesInteresting": False, "votesFalse": False}


@pytest.mark.asyncio
async def test_repeat_vote_is_noop(shell):
    await shell.start()
    await shell.vote(2, "votesLove")
    shell.store.update_vote_counts = AsyncMock()

    assert await shell.vote(2, "votesLove") is None
    shell.store.update_vote_counts.assert_not_called()
    assert shell.find_fact(2).votes_love == 1


@pytest.mark.asyncio
async def test_changing_vote_moves_count_in_one_update(shell, votes):
    await shell.start()
    await shell.vote(3, "votesLove")
    shell.store.update_vote_counts = AsyncMock(wraps=shell.store.update_vote_counts)

    updated = await shell.vote(3, "votesFalse")

    shell.store.update_vote_counts.assert_awaited_once_with(3, {"votesLove": 0, "votesInteresting": 0, "votesFalse": 1})
    assert updated.counters() == {"votesLove": 0, "votesInteresting": 0, "votesFalse": 1}
    assert votes.get(3).chosen() == "votesFalse"


@pytest.mark.asyncio
async def test_failed_vote_changes_nothing(shell, votes):
    await shell.start()
    shell.store.fail_with = "update failed"

    assert await shell.vote(4, "votesInteresting") is None
    assert shell.find_fact(4).votes_interesting == 0
    assert votes.get(4).chosen() is None
    assert shell.row(shell.find_fact(4)).is_voting is False


@pytest.mark.asyncio
async def test_buttons_disabled_while_voting(shell):
    await shell.start()
    fact = shell.find_fact(5)
    row = shell.row(fact)
    seen = {}

    async def update(fact_id, counters):
        seen["disabled"] = [row.button_disabled(shell, o) for o in ("votesLove", "votesInteresting", "votesFalse")]
        # a second click while in flight is ignored
        seen["second"] = await row.vote("votesFalse", shell)
        raise StoreError("slow store gave up")

    shell.store.update_vote_counts = update
    await row.vote("votesLove", shell)

    assert seen["disabled"] == [True, True, True]
    assert seen["second"] is None
    assert not row.button_disabled(shell, "votesLove")


@pytest.mark.asyncio
async def test_chosen_option_button_disabled(shell, votes):
    await shell.start()
    fact = shell.find_fact(1)
    votes.set(1, VoteRecord.only("votesInteresting"))
    row = shell.row(fact)
    assert row.button_disabled(shell, "votesInteresting")
    assert not row.button_disabled(shell, "votesLove")


@pytest.mark.asyncio
async def test_unknown_option_rejected(shell):
    await shell.start()
    with pytest.raises(ValueError):
        await shell.vote(1, "votesMeh")


@pytest.mark.asyncio
async def test_unknown_fact(shell):
    await shell.start()
    with pytest.raises(KeyError):
        await shell.vote(404, "votesLove")
    with pytest.raises(KeyError):
        await FactRow(fact_id=404).vote("votesLove", shell)


@pytest.mark.asyncio
async def test_sky_is_blue_stays_disputed(shell):
    await shell.start()
    sky = shell.find_fact(1)
    assert sky.text == "The sky is blue"
    assert sky.disputed

    updated = await shell.vote(1, "votesInteresting")

    assert updated.counters() == {"votesLove": 2, "votesInteresting": 1, "votesFalse": 5}
    assert updated.disputed
