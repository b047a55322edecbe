# Standard library imports
from uuid import UUID

# Third-party imports
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import Vote


async def get_candidate_by_id(db: AsyncSession, candidate_id: UUID, refresh: bool = False) -> Candidate | None:
    query = select(Candidate).where(Candidate.id == candidate_id)
    if refresh:
        # Counters are updated with SQL expressions, reload what the session already holds
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_vote_by_id(db: AsyncSession, vote_id: UUID) -> Vote | None:
    result = await db.execute(select(Vote).where(Vote.id == vote_id))
    return result.scalar_one_or_none()


async def get_active_candidates_for_position(db: AsyncSession, position: str) -> list[Candidate]:
    result = await db.execute(
        select(Candidate)
        .where(Candidate.position == position, Candidate.is_active.is_(True))
        .order_by(Candidate.vote_count.desc(), Candidate.created_at.asc(), Candidate.name.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
