# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.dependancies.common import get_current_admin, get_current_user
from decisiondeck.models.auth.user import User
from decisiondeck.schemas.analytics.analytics_schemas import (
    CandidateAnalytics,
    DashboardAnalytics,
    PositionAnalytics,
    RealtimeSnapshot,
    TimeRange,
    UserBehaviorAnalytics,
)
from decisiondeck.services.analytics import analytics_services

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard", response_model=DashboardAnalytics)
async def get_dashboard(
    time_range: TimeRange = Query("7d", alias="timeRange"),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await analytics_services.dashboard_analytics(db, time_range)


@router.get("/candidates/{candidate_id}", response_model=CandidateAnalytics)
async def get_candidate_analytics(
    candidate_id: UUID,
    time_range: TimeRange = Query("30d", alias="timeRange"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Candidate history and standing; voter demographics are included for admins"""
    return await analytics_services.candidate_analytics(
        db, candidate_id, time_range, include_demographics=current_user.is_admin
    )


@router.get("/positions/{position}", response_model=PositionAnalytics)
async def get_position_analytics(
    position: str,
    time_range: TimeRange = Query("7d", alias="timeRange"),
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await analytics_services.position_analytics(db, position, time_range)


@router.get("/users/behavior", response_model=UserBehaviorAnalytics)
async def get_user_behavior(
    time_range: TimeRange = Query("30d", alias="timeRange"),
    _: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_async_session),
):
    return await analytics_services.user_behavior_analytics(db, time_range)


@router.get("/realtime", response_model=RealtimeSnapshot)
async def get_realtime(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Activity over the last 24 hours"""
    return await analytics_services.realtime_snapshot(db)
