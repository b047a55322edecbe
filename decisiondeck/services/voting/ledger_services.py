"""
Vote ledger: the only code that writes votes or touches vote counters.

Each lifecycle step is its own function so it can be called and tested on its
own. ``cast_vote`` and ``invalidate_vote`` compose them into one transaction
and publish the resulting count once the transaction has committed.
"""

# Standard library imports
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

# Third-party imports
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import (
    CandidateInactiveError,
    CandidateNotFoundError,
    DuplicateVoteError,
    PositionMismatchError,
    VoteNotFoundError,
)
from decisiondeck.core.monitoring.logging import LoggerAdapter, get_contextual_logger
from decisiondeck.db_selectors.voting import get_candidate_by_id, get_vote_by_id
from decisiondeck.models.auth.user import User
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import Vote
from decisiondeck.schemas.voting.vote_schemas import RecountResponse, VoteInvalidationResponse, VoteReceipt
from decisiondeck.utils.user_agent_utils import parse_user_agent

MAX_USER_AGENT_LENGTH = 500


class VoteFanout(Protocol):
    async def emit_vote_updated(self, position: str, candidate_id: UUID, vote_count: int) -> int: ...


# ----- Lifecycle steps -----


async def record_vote(
    db: AsyncSession,
    voter_id: UUID,
    candidate: Candidate,
    cast_at: datetime,
    client_address: str | None = None,
    user_agent: str | None = None,
) -> Vote:
    """
    Insert the vote row; the (voter, position) unique constraint decides races.

    Raises:
        DuplicateVoteError: the voter already holds a vote for this position.
            The session is rolled back before raising.
    """
    client = parse_user_agent(user_agent)
    vote = Vote(
        voter_id=voter_id,
        candidate_id=candidate.id,
        position=candidate.position,
        ip_address=client_address,
        user_agent=user_agent[:MAX_USER_AGENT_LENGTH] if user_agent else None,
        device_type=client.device_type,
        browser=client.browser,
        os=client.os,
        is_valid=True,
        created_at=cast_at,
        updated_at=cast_at,
    )
    db.add(vote)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateVoteError()
    return vote


async def increment_candidate_vote_count(db: AsyncSession, candidate_id: UUID, voted_at: datetime) -> int:
    """Atomically add one to the candidate's counter and return the new value."""
    await db.execute(
        update(Candidate)
        .where(Candidate.id == candidate_id)
        .values(vote_count=Candidate.vote_count + 1, last_vote_at=voted_at)
        .execution_options(synchronize_session=False)
    )
    return await _current_vote_count(db, candidate_id)


async def decrement_candidate_vote_count(db: AsyncSession, candidate_id: UUID) -> int:
    """Atomically remove one from the candidate's counter, never going below zero."""
    await db.execute(
        update(Candidate)
        .where(Candidate.id == candidate_id, Candidate.vote_count > 0)
        .values(vote_count=Candidate.vote_count - 1)
        .execution_options(synchronize_session=False)
    )
    return await _current_vote_count(db, candidate_id)


async def record_voter_participation(db: AsyncSession, voter_id: UUID, voted_at: datetime) -> None:
    # Every accepted vote occupies a new position for this voter
    await db.execute(
        update(User)
        .where(User.id == voter_id)
        .values(
            total_votes=User.total_votes + 1,
            positions_voted=User.positions_voted + 1,
            last_vote_at=voted_at,
        )
        .execution_options(synchronize_session=False)
    )


async def retract_voter_participation(db: AsyncSession, voter_id: UUID) -> None:
    # The position slot stays consumed, so positions_voted is left alone
    await db.execute(
        update(User)
        .where(User.id == voter_id, User.total_votes > 0)
        .values(total_votes=User.total_votes - 1)
        .execution_options(synchronize_session=False)
    )


async def publish_vote_update(
    fanout: VoteFanout | None,
    position: str,
    candidate_id: UUID,
    vote_count: int,
    logger: LoggerAdapter,
) -> None:
    """Broadcast a committed count. Failures are logged; the vote already stands."""
    if fanout is None:
        return
    try:
        await fanout.emit_vote_updated(position, candidate_id, vote_count)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Vote committed but broadcast failed: {e}")


async def _current_vote_count(db: AsyncSession, candidate_id: UUID) -> int:
    result = await db.execute(select(Candidate.vote_count).where(Candidate.id == candidate_id))
    return int(result.scalar_one())


# ----- Operations -----


async def cast_vote(
    db: AsyncSession,
    voter_id: UUID,
    candidate_id: UUID,
    position: str,
    client_address: str | None = None,
    user_agent: str | None = None,
    fanout: VoteFanout | None = None,
) -> VoteReceipt:
    """
    Cast ``voter_id``'s vote for ``candidate_id`` in ``position``.

    Raises:
        CandidateNotFoundError: no candidate with that id
        CandidateInactiveError: the candidate has been deactivated
        PositionMismatchError: the candidate stands for a different position
        DuplicateVoteError: the voter already voted for this position
    """
    position = position.strip()
    logger = get_contextual_logger(__name__, voter_id=voter_id, candidate_id=candidate_id, position=position)

    candidate = await get_candidate_by_id(db, candidate_id)
    if candidate is None:
        raise CandidateNotFoundError()
    if not candidate.is_active:
        raise CandidateInactiveError()
    if candidate.position != position:
        logger.warning(f"Position mismatch, candidate stands for {candidate.position!r}")
        raise PositionMismatchError(f"Candidate is not running for {position!r}")

    cast_at = datetime.now(UTC)
    try:
        vote = await record_vote(db, voter_id, candidate, cast_at, client_address, user_agent)
    except DuplicateVoteError:
        logger.warning("Duplicate vote rejected")
        raise

    new_count = await increment_candidate_vote_count(db, candidate_id, cast_at)
    await record_voter_participation(db, voter_id, cast_at)
    await db.commit()

    logger.info(f"Vote {vote.id} cast, candidate now has {new_count} votes")
    await publish_vote_update(fanout, position, candidate_id, new_count, logger)

    return VoteReceipt(
        vote_id=vote.id,
        position=position,
        candidate_id=candidate_id,
        new_count=new_count,
        timestamp=cast_at,
    )


async def invalidate_vote(db: AsyncSession, vote_id: UUID, fanout: VoteFanout | None = None) -> VoteInvalidationResponse:
    """
    Mark a vote invalid and reverse the counter increment it caused.

    The row is kept for audit and the voter's (voter, position) slot stays
    taken. Invalidating an already-invalid vote changes nothing.
    """
    logger = get_contextual_logger(__name__, vote_id=vote_id)

    vote = await get_vote_by_id(db, vote_id)
    if vote is None:
        raise VoteNotFoundError()
    candidate_id = vote.candidate_id
    voter_id = vote.voter_id
    position = vote.position

    invalidated_at = datetime.now(UTC)
    # Conditional update so concurrent invalidations decrement at most once
    result = await db.execute(
        update(Vote)
        .where(Vote.id == vote_id, Vote.is_valid.is_(True))
        .values(is_valid=False, invalidated_at=invalidated_at, updated_at=invalidated_at)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        logger.info("Vote already invalid, nothing to do")
        new_count = await _current_vote_count(db, candidate_id)
        changed = False
    else:
        new_count = await decrement_candidate_vote_count(db, candidate_id)
        await retract_voter_participation(db, voter_id)
        changed = True
    await db.commit()

    vote = await db.get(Vote, vote_id, populate_existing=True)
    if changed:
        logger.info(f"Vote invalidated, candidate {candidate_id} now has {new_count} votes")
        await publish_vote_update(fanout, position, candidate_id, new_count, logger)

    return VoteInvalidationResponse(
        vote_id=vote_id,
        candidate_id=candidate_id,
        position=position,
        is_valid=vote.is_valid,
        new_count=new_count,
        invalidated_at=vote.invalidated_at,
    )


async def recount_candidate_votes(db: AsyncSession, candidate_id: UUID) -> RecountResponse:
    """Rebuild a candidate's counter from its valid vote rows."""
    candidate = await get_candidate_by_id(db, candidate_id, refresh=True)
    if candidate is None:
        raise CandidateNotFoundError()
    previous = candidate.vote_count

    result = await db.execute(
        select(func.count(Vote.id)).where(Vote.candidate_id == candidate_id, Vote.is_valid.is_(True))
    )
    actual = int(result.scalar_one())
    if actual != previous:
        candidate.vote_count = actual
        await db.commit()
        get_contextual_logger(__name__, candidate_id=candidate_id).warning(
            f"Vote counter drift repaired: {previous} -> {actual}"
        )
    return RecountResponse(candidate_id=candidate_id, previous_count=previous, vote_count=actual)
