# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.dependancies.common import PageParams, get_current_admin
from decisiondeck.models.auth.user import User
from decisiondeck.schemas.voting.candidate_schemas import (
    CandidateCreateRequest,
    CandidateDetailResponse,
    CandidateListResponse,
    CandidateResponse,
    CandidateStatsOverview,
    CandidateUpdateRequest,
)
from decisiondeck.schemas.voting.vote_schemas import RecountResponse
from decisiondeck.services.voting import candidate_services
from decisiondeck.services.voting.ledger_services import recount_candidate_votes

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.get("", response_model=CandidateListResponse)
async def list_candidates(
    paging: PageParams = Depends(),
    position: str | None = Query(None, max_length=100),
    search: str | None = Query(None, max_length=100),
    db: AsyncSession = Depends(get_async_session),
):
    """Active candidates, optionally filtered by position or a search term"""
    return await candidate_services.list_candidates(db, paging.page, paging.limit, position=position, search=search)


@router.get("/positions/list", response_model=list[str])
async def list_positions(db: AsyncSession = Depends(get_async_session)):
    """Positions that currently have active candidates"""
    return await candidate_services.list_positions(db)


@router.get("/stats/overview", response_model=CandidateStatsOverview)
async def candidate_stats(db: AsyncSession = Depends(get_async_session)):
    return await candidate_services.candidate_stats_overview(db)


@router.get("/{candidate_id}", response_model=CandidateDetailResponse)
async def get_candidate(candidate_id: UUID, db: AsyncSession = Depends(get_async_session)):
    return await candidate_services.get_candidate_detail(db, candidate_id)


@router.post("", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    data: CandidateCreateRequest,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await candidate_services.create_candidate(db, current_admin, data)


@router.put("/{candidate_id}", response_model=CandidateResponse)
async def update_candidate(
    candidate_id: UUID,
    data: CandidateUpdateRequest,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await candidate_services.update_candidate(db, current_admin, candidate_id, data)


@router.delete("/{candidate_id}", response_model=CandidateResponse)
async def delete_candidate(
    candidate_id: UUID,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """Deactivate a candidate; existing votes are preserved"""
    return await candidate_services.deactivate_candidate(db, current_admin, candidate_id)


@router.post("/{candidate_id}/recount", response_model=RecountResponse)
async def recount_candidate(
    candidate_id: UUID,
    _: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    """Rebuild the vote counter from valid vote records"""
    return await recount_candidate_votes(db, candidate_id)
