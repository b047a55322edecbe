# Standard library imports
import asyncio
from uuid import uuid4

# Third-party imports
import pytest
from sqlalchemy import func, select, update

# Local application imports
from decisiondeck.core.exceptions import (
    CandidateInactiveError,
    CandidateNotFoundError,
    DuplicateVoteError,
    PositionMismatchError,
    VoteNotFoundError,
)
from decisiondeck.models import Candidate, DeviceType, User, Vote
from decisiondeck.services.voting.ledger_services import (
    cast_vote,
    decrement_candidate_vote_count,
    invalidate_vote,
    recount_candidate_votes,
)

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


class RecordingFanout:
    def __init__(self):
        self.events = []

    async def emit_vote_updated(self, position, candidate_id, vote_count):
        self.events.append((position, candidate_id, vote_count))
        return 1


class BrokenFanout:
    async def emit_vote_updated(self, position, candidate_id, vote_count):
        raise RuntimeError("socket gone")


async def _vote_count(session_factory, candidate_id):
    async with session_factory() as db:
        return (await db.execute(select(Candidate.vote_count).where(Candidate.id == candidate_id))).scalar_one()


async def _valid_votes(session_factory, candidate_id):
    async with session_factory() as db:
        result = await db.execute(
            select(func.count(Vote.id)).where(Vote.candidate_id == candidate_id, Vote.is_valid.is_(True))
        )
        return result.scalar_one()


async def test_cast_vote_records_vote_and_updates_counters(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")

    async with session_factory() as db:
        receipt = await cast_vote(
            db, voter.id, alice.id, "President", client_address="10.0.0.1", user_agent=IPHONE_UA
        )

    assert receipt.new_count == 1
    assert receipt.candidate_id == alice.id
    assert receipt.position == "President"

    async with session_factory() as db:
        vote = await db.get(Vote, receipt.vote_id)
        stored_voter = await db.get(User, voter.id)
        stored_candidate = await db.get(Candidate, alice.id)

    assert vote.is_valid is True
    assert vote.ip_address == "10.0.0.1"
    assert vote.device_type == DeviceType.MOBILE
    assert vote.browser == "Safari"
    assert vote.os == "iOS"
    assert stored_voter.total_votes == 1
    assert stored_voter.positions_voted == 1
    assert stored_voter.last_vote_at is not None
    assert stored_candidate.vote_count == 1
    assert stored_candidate.last_vote_at is not None


async def test_second_vote_for_same_position_is_rejected(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    bob = await make_candidate("Bob", "President")
    voter_id, alice_id, bob_id = voter.id, alice.id, bob.id

    async with session_factory() as db:
        await cast_vote(db, voter_id, alice_id, "President")

    async with session_factory() as db:
        with pytest.raises(DuplicateVoteError):
            await cast_vote(db, voter_id, bob_id, "President")

    assert await _vote_count(session_factory, alice_id) == 1
    assert await _vote_count(session_factory, bob_id) == 0
    async with session_factory() as db:
        stored_voter = await db.get(User, voter_id)
    assert stored_voter.total_votes == 1


async def test_voter_may_vote_once_in_each_position(session_factory, make_user, make_candidate):
    voter = await make_user()
    president = await make_candidate("Alice", "President")
    treasurer = await make_candidate("Carol", "Treasurer")

    async with session_factory() as db:
        await cast_vote(db, voter.id, president.id, "President")
    async with session_factory() as db:
        await cast_vote(db, voter.id, treasurer.id, "Treasurer")

    async with session_factory() as db:
        stored_voter = await db.get(User, voter.id)
    assert stored_voter.total_votes == 2
    assert stored_voter.positions_voted == 2


async def test_concurrent_casts_for_one_position_accept_exactly_one(session_factory, make_user, make_candidate):
    voter = await make_user()
    candidates = [await make_candidate(name, "President") for name in ("Alice", "Bob", "Carol", "Dan")]
    voter_id = voter.id
    candidate_ids = [c.id for c in candidates]

    async def attempt(candidate_id):
        async with session_factory() as db:
            return await cast_vote(db, voter_id, candidate_id, "President")

    outcomes = await asyncio.gather(*(attempt(cid) for cid in candidate_ids), return_exceptions=True)

    accepted = [o for o in outcomes if not isinstance(o, Exception)]
    rejected = [o for o in outcomes if isinstance(o, Exception)]
    assert len(accepted) == 1
    assert all(isinstance(o, DuplicateVoteError) for o in rejected)

    counts = [await _vote_count(session_factory, cid) for cid in candidate_ids]
    assert sorted(counts) == [0, 0, 0, 1]
    async with session_factory() as db:
        votes = (await db.execute(select(func.count(Vote.id)).where(Vote.voter_id == voter_id))).scalar_one()
    assert votes == 1


async def test_cast_vote_for_unknown_candidate(session_factory, make_user):
    voter = await make_user()
    async with session_factory() as db:
        with pytest.raises(CandidateNotFoundError):
            await cast_vote(db, voter.id, uuid4(), "President")


async def test_cast_vote_for_inactive_candidate(session_factory, make_user, make_candidate):
    voter = await make_user()
    retired = await make_candidate("Retired", "President", is_active=False)
    async with session_factory() as db:
        with pytest.raises(CandidateInactiveError):
            await cast_vote(db, voter.id, retired.id, "President")
    assert await _vote_count(session_factory, retired.id) == 0


async def test_cast_vote_with_wrong_position(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    async with session_factory() as db:
        with pytest.raises(PositionMismatchError):
            await cast_vote(db, voter.id, alice.id, "Treasurer")
    assert await _vote_count(session_factory, alice.id) == 0


async def test_fanout_receives_committed_count(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    fanout = RecordingFanout()

    async with session_factory() as db:
        await cast_vote(db, voter.id, alice.id, "President", fanout=fanout)

    assert fanout.events == [("President", alice.id, 1)]


async def test_broadcast_failure_does_not_undo_vote(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")

    async with session_factory() as db:
        receipt = await cast_vote(db, voter.id, alice.id, "President", fanout=BrokenFanout())

    assert receipt.new_count == 1
    assert await _vote_count(session_factory, alice.id) == 1


async def test_invalidate_vote_reverses_counter_and_keeps_row(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    fanout = RecordingFanout()
    async with session_factory() as db:
        receipt = await cast_vote(db, voter.id, alice.id, "President")

    async with session_factory() as db:
        outcome = await invalidate_vote(db, receipt.vote_id, fanout=fanout)

    assert outcome.is_valid is False
    assert outcome.new_count == 0
    assert outcome.invalidated_at is not None
    assert fanout.events == [("President", alice.id, 0)]

    async with session_factory() as db:
        vote = await db.get(Vote, receipt.vote_id)
        stored_voter = await db.get(User, voter.id)
    assert vote is not None
    assert vote.is_valid is False
    assert stored_voter.total_votes == 0
    assert stored_voter.positions_voted == 1
    assert await _vote_count(session_factory, alice.id) == 0


async def test_invalidating_twice_changes_nothing(session_factory, make_user, make_candidate):
    first_voter = await make_user("first_voter")
    second_voter = await make_user("second_voter")
    alice = await make_candidate("Alice", "President")
    async with session_factory() as db:
        receipt = await cast_vote(db, first_voter.id, alice.id, "President")
    async with session_factory() as db:
        await cast_vote(db, second_voter.id, alice.id, "President")

    fanout = RecordingFanout()
    async with session_factory() as db:
        await invalidate_vote(db, receipt.vote_id, fanout=fanout)
    async with session_factory() as db:
        repeat = await invalidate_vote(db, receipt.vote_id, fanout=fanout)

    assert repeat.is_valid is False
    assert repeat.new_count == 1
    assert len(fanout.events) == 1
    assert await _vote_count(session_factory, alice.id) == 1


async def test_invalidated_vote_still_occupies_the_position(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    bob = await make_candidate("Bob", "President")
    voter_id, bob_id = voter.id, bob.id
    async with session_factory() as db:
        receipt = await cast_vote(db, voter_id, alice.id, "President")
    async with session_factory() as db:
        await invalidate_vote(db, receipt.vote_id)

    async with session_factory() as db:
        with pytest.raises(DuplicateVoteError):
            await cast_vote(db, voter_id, bob_id, "President")


async def test_invalidate_unknown_vote(session_factory):
    async with session_factory() as db:
        with pytest.raises(VoteNotFoundError):
            await invalidate_vote(db, uuid4())


async def test_decrement_never_goes_below_zero(session_factory, make_candidate):
    alice = await make_candidate("Alice", "President")
    async with session_factory() as db:
        assert await decrement_candidate_vote_count(db, alice.id) == 0
        await db.commit()
    assert await _vote_count(session_factory, alice.id) == 0


async def test_counters_match_valid_votes_after_mixed_activity(session_factory, make_user, make_candidate):
    alice = await make_candidate("Alice", "President")
    bob = await make_candidate("Bob", "President")
    voters = [await make_user(f"voter_{i}") for i in range(5)]

    receipts = []
    for i, voter in enumerate(voters):
        target = alice if i % 2 == 0 else bob
        async with session_factory() as db:
            receipts.append(await cast_vote(db, voter.id, target.id, "President"))
    async with session_factory() as db:
        await invalidate_vote(db, receipts[0].vote_id)

    for candidate_id in (alice.id, bob.id):
        assert await _vote_count(session_factory, candidate_id) == await _valid_votes(session_factory, candidate_id)
    assert await _vote_count(session_factory, alice.id) == 2
    assert await _vote_count(session_factory, bob.id) == 2


async def test_recount_repairs_drift(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    async with session_factory() as db:
        await cast_vote(db, voter.id, alice.id, "President")
    async with session_factory() as db:
        await db.execute(update(Candidate).where(Candidate.id == alice.id).values(vote_count=7))
        await db.commit()

    async with session_factory() as db:
        outcome = await recount_candidate_votes(db, alice.id)

    assert outcome.previous_count == 7
    assert outcome.vote_count == 1
    assert await _vote_count(session_factory, alice.id) == 1


async def test_recount_without_drift_is_a_no_op(session_factory, make_user, make_candidate):
    voter = await make_user()
    alice = await make_candidate("Alice", "President")
    async with session_factory() as db:
        await cast_vote(db, voter.id, alice.id, "President")

    async with session_factory() as db:
        outcome = await recount_candidate_votes(db, alice.id)

    assert outcome.previous_count == outcome.vote_count == 1
