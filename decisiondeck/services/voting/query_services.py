"""
Read-only views over the vote ledger. Nothing here writes.
"""

# Standard library imports
from datetime import UTC, datetime, timedelta
from uuid import UUID

# Third-party imports
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import ValidationFailedError
from decisiondeck.db_selectors.voting import get_active_candidates_for_position
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import Vote
from decisiondeck.schemas.voting.vote_schemas import (
    AdminStats,
    CandidateRef,
    CandidateResult,
    DailyVoteCount,
    OverviewStats,
    PositionResults,
    PositionVoteCount,
    VoteHistoryItem,
    VoteHistoryResponse,
)
from decisiondeck.utils.pagination_utils import page_offset, total_pages
from decisiondeck.utils.stats_utils import as_utc, bucket_counts, share

TOP_POSITIONS_LIMIT = 5


async def results_for_position(db: AsyncSession, position: str) -> PositionResults:
    """
    Current standings for ``position``.

    Percentages are taken over the counters of active candidates only, so
    they add up to 100 (within rounding) whenever any vote is counted.
    """
    position = position.strip()
    candidates = await get_active_candidates_for_position(db, position)
    total = sum(c.vote_count for c in candidates)
    return PositionResults(
        position=position,
        results=[
            CandidateResult(
                candidate_id=c.id,
                name=c.name,
                party=c.party,
                image_url=c.image_url,
                vote_count=c.vote_count,
                percentage=share(c.vote_count, total),
            )
            for c in candidates
        ],
        total_votes=total,
        total_candidates=len(candidates),
    )


async def voting_history(db: AsyncSession, voter_id: UUID, page: int, page_size: int) -> VoteHistoryResponse:
    """The voter's own votes, newest first, including invalidated ones."""
    total = (await db.execute(select(func.count(Vote.id)).where(Vote.voter_id == voter_id))).scalar_one()
    result = await db.execute(
        select(Vote, Candidate)
        .outerjoin(Candidate, Candidate.id == Vote.candidate_id)
        .where(Vote.voter_id == voter_id)
        .order_by(Vote.created_at.desc(), Vote.id)
        .offset(page_offset(page, page_size))
        .limit(page_size)
    )
    votes = []
    for vote, candidate in result.all():
        item = VoteHistoryItem.model_validate(vote)
        if candidate is not None:
            item.candidate = CandidateRef.model_validate(candidate)
        votes.append(item)
    return VoteHistoryResponse(
        votes=votes,
        total_pages=total_pages(total, page_size),
        current_page=page,
        total=total,
    )


async def _votes_by_position(db: AsyncSession, *conditions, limit: int | None = None) -> list[PositionVoteCount]:
    query = (
        select(Vote.position, func.count(Vote.id).label("vote_count"))
        .where(Vote.is_valid.is_(True), *conditions)
        .group_by(Vote.position)
        .order_by(func.count(Vote.id).desc(), Vote.position)
    )
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return [PositionVoteCount(position=position, vote_count=count) for position, count in result.all()]


async def overview_stats(db: AsyncSession) -> OverviewStats:
    valid = Vote.is_valid.is_(True)
    since = datetime.now(UTC) - timedelta(hours=24)

    total_votes = (await db.execute(select(func.count(Vote.id)).where(valid))).scalar_one()
    total_positions = (await db.execute(select(func.count(distinct(Vote.position))).where(valid))).scalar_one()
    recent_votes = (
        await db.execute(select(func.count(Vote.id)).where(valid, Vote.created_at >= since))
    ).scalar_one()

    return OverviewStats(
        total_votes=total_votes,
        total_positions=total_positions,
        recent_votes=recent_votes,
        top_positions=await _votes_by_position(db, limit=TOP_POSITIONS_LIMIT),
    )


async def admin_stats(
    db: AsyncSession,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> AdminStats:
    """Vote counts for an optional window; either bound may be given alone."""
    start_date = as_utc(start_date) if start_date is not None else None
    end_date = as_utc(end_date) if end_date is not None else None
    if start_date and end_date and start_date > end_date:
        raise ValidationFailedError("startDate must be before endDate")

    window = []
    if start_date is not None:
        window.append(Vote.created_at >= start_date)
    if end_date is not None:
        window.append(Vote.created_at <= end_date)

    counts = await db.execute(
        select(Vote.is_valid, func.count(Vote.id)).where(*window).group_by(Vote.is_valid)
    )
    by_validity = {bool(is_valid): count for is_valid, count in counts.all()}
    valid_votes = by_validity.get(True, 0)
    invalid_votes = by_validity.get(False, 0)

    timestamps = await db.execute(select(Vote.created_at).where(Vote.is_valid.is_(True), *window))
    daily = bucket_counts(timestamps.scalars().all())

    return AdminStats(
        total_votes=valid_votes + invalid_votes,
        valid_votes=valid_votes,
        invalid_votes=invalid_votes,
        votes_by_position=await _votes_by_position(db, *window),
        daily_votes=[DailyVoteCount(date=day, count=count) for day, count in daily],
        start_date=start_date,
        end_date=end_date,
    )
