# Standard library imports
from datetime import datetime
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.core.realtime import RoomManager
from decisiondeck.dependancies.common import PageParams, get_current_admin, get_current_user, get_room_manager
from decisiondeck.models.auth.user import User
from decisiondeck.schemas.voting.vote_schemas import (
    AdminStats,
    CastVoteRequest,
    OverviewStats,
    PositionResults,
    VoteHistoryResponse,
    VoteInvalidationResponse,
    VoteReceipt,
)
from decisiondeck.services.voting import query_services
from decisiondeck.services.voting.ledger_services import cast_vote, invalidate_vote
from decisiondeck.utils.request_utils import get_client_address

router = APIRouter(prefix="/votes", tags=["Votes"])


@router.post("", response_model=VoteReceipt, status_code=status.HTTP_201_CREATED)
async def create_vote(
    data: CastVoteRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    rooms: RoomManager = Depends(get_room_manager),
    db: AsyncSession = Depends(get_async_session),
):
    """Cast one vote for a position"""
    return await cast_vote(
        db,
        voter_id=current_user.id,
        candidate_id=data.candidate_id,
        position=data.position,
        client_address=get_client_address(request),
        user_agent=request.headers.get("user-agent"),
        fanout=rooms,
    )


@router.get("/results/{position}", response_model=PositionResults)
async def get_results(position: str, db: AsyncSession = Depends(get_async_session)):
    """Current standings for a position"""
    return await query_services.results_for_position(db, position)


@router.get("/history", response_model=VoteHistoryResponse)
async def get_history(
    paging: PageParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """The caller's own votes, newest first"""
    return await query_services.voting_history(db, current_user.id, paging.page, paging.limit)


@router.get("/stats/overview", response_model=OverviewStats)
async def get_overview_stats(db: AsyncSession = Depends(get_async_session)):
    return await query_services.overview_stats(db)


@router.get("/stats/admin", response_model=AdminStats)
async def get_admin_stats(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    _: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await query_services.admin_stats(db, start_date=start_date, end_date=end_date)


@router.put("/{vote_id}/invalidate", response_model=VoteInvalidationResponse)
async def invalidate(
    vote_id: UUID,
    _: User = Depends(get_current_admin),
    rooms: RoomManager = Depends(get_room_manager),
    db: AsyncSession = Depends(get_async_session),
):
    """Mark a vote invalid and take it off its candidate's count"""
    return await invalidate_vote(db, vote_id, fanout=rooms)
