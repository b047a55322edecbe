# Standard library imports
from uuid import UUID

# Third-party imports
from sqlalchemy import distinct, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import CandidateNotFoundError, ValidationFailedError
from decisiondeck.core.monitoring.logging import get_contextual_logger
from decisiondeck.db_selectors.voting import get_active_candidates_for_position, get_candidate_by_id
from decisiondeck.models.auth.user import User
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import Vote
from decisiondeck.schemas.voting.candidate_schemas import (
    CandidateCreateRequest,
    CandidateDetailResponse,
    CandidateListResponse,
    CandidateResponse,
    CandidateStatsOverview,
    CandidateUpdateRequest,
    PositionCandidateCount,
)
from decisiondeck.utils.model_utils import update_model_fields
from decisiondeck.utils.pagination_utils import count_rows, page_offset, total_pages
from decisiondeck.utils.stats_utils import share


async def list_candidates(
    db: AsyncSession,
    page: int,
    page_size: int,
    position: str | None = None,
    search: str | None = None,
) -> CandidateListResponse:
    """Active candidates, most voted first."""
    query = select(Candidate).where(Candidate.is_active.is_(True))
    if position:
        query = query.where(Candidate.position == position.strip())
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Candidate.name).like(pattern),
                func.lower(Candidate.party).like(pattern),
                func.lower(Candidate.description).like(pattern),
            )
        )

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(Candidate.vote_count.desc(), Candidate.created_at.desc())
        .offset(page_offset(page, page_size))
        .limit(page_size)
        .execution_options(populate_existing=True)
    )
    return CandidateListResponse(
        candidates=[CandidateResponse.model_validate(c) for c in result.scalars().all()],
        total_pages=total_pages(total, page_size),
        current_page=page,
        total=total,
    )


async def get_candidate_detail(db: AsyncSession, candidate_id: UUID) -> CandidateDetailResponse:
    candidate = await get_candidate_by_id(db, candidate_id, refresh=True)
    if candidate is None:
        raise CandidateNotFoundError()

    detail = CandidateDetailResponse.model_validate(candidate)
    rivals = await get_active_candidates_for_position(db, candidate.position)
    detail.total_candidates_in_position = len(rivals)
    if candidate.is_active:
        total = sum(c.vote_count for c in rivals)
        detail.percentage = share(candidate.vote_count, total)
        detail.position_rank = 1 + sum(1 for c in rivals if c.vote_count > candidate.vote_count)
    return detail


async def create_candidate(db: AsyncSession, actor: User, data: CandidateCreateRequest) -> Candidate:
    candidate = Candidate(
        name=data.name,
        position=data.position,
        party=data.party or None,
        description=data.description or None,
        image_url=data.image_url or None,
        created_by_id=actor.id,
    )
    db.add(candidate)
    await db.commit()
    get_contextual_logger(__name__, actor_id=actor.id, position=candidate.position).info(
        f"Candidate created: {candidate.name} ({candidate.id})"
    )
    return candidate


async def update_candidate(db: AsyncSession, actor: User, candidate_id: UUID, data: CandidateUpdateRequest) -> Candidate:
    candidate = await get_candidate_by_id(db, candidate_id, refresh=True)
    if candidate is None:
        raise CandidateNotFoundError()

    if data.position is not None and data.position != candidate.position:
        has_votes = await db.execute(select(exists().where(Vote.candidate_id == candidate_id)))
        if has_votes.scalar():
            raise ValidationFailedError("Cannot move a candidate that already has votes to another position")
    if "name" in data.model_fields_set and data.name is None:
        raise ValidationFailedError("Name cannot be empty")
    if "position" in data.model_fields_set and data.position is None:
        raise ValidationFailedError("Position cannot be empty")
    if "is_active" in data.model_fields_set and data.is_active is None:
        raise ValidationFailedError("isActive cannot be null")

    changed = update_model_fields(candidate, data)
    if changed:
        await db.commit()
        get_contextual_logger(__name__, actor_id=actor.id, candidate_id=candidate_id).info(
            f"Candidate updated: {', '.join(changed)}"
        )
    return candidate


async def deactivate_candidate(db: AsyncSession, actor: User, candidate_id: UUID) -> Candidate:
    """Hide a candidate from ballots; its votes and counter are kept."""
    candidate = await get_candidate_by_id(db, candidate_id, refresh=True)
    if candidate is None:
        raise CandidateNotFoundError()
    if candidate.is_active:
        candidate.is_active = False
        await db.commit()
        get_contextual_logger(__name__, actor_id=actor.id, candidate_id=candidate_id).info("Candidate deactivated")
    return candidate


async def list_positions(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(distinct(Candidate.position)).where(Candidate.is_active.is_(True)).order_by(Candidate.position)
    )
    return list(result.scalars().all())


async def candidate_stats_overview(db: AsyncSession) -> CandidateStatsOverview:
    total_candidates = (await db.execute(select(func.count(Candidate.id)))).scalar_one()
    active_candidates = (
        await db.execute(select(func.count(Candidate.id)).where(Candidate.is_active.is_(True)))
    ).scalar_one()

    by_position = await db.execute(
        select(Candidate.position, func.count(Candidate.id), func.coalesce(func.sum(Candidate.vote_count), 0))
        .where(Candidate.is_active.is_(True))
        .group_by(Candidate.position)
        .order_by(func.sum(Candidate.vote_count).desc(), Candidate.position)
    )
    positions = [
        PositionCandidateCount(position=position, candidate_count=count, total_votes=int(votes))
        for position, count, votes in by_position.all()
    ]
    return CandidateStatsOverview(
        total_candidates=total_candidates,
        active_candidates=int(active_candidates),
        total_positions=len(positions),
        positions=positions,
    )
