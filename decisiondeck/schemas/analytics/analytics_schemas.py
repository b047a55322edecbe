# Standard library imports
from datetime import datetime
from typing import Literal
from uuid import UUID

# Local application imports
from decisiondeck.schemas.common import CamelModel
from decisiondeck.schemas.voting.vote_schemas import PositionVoteCount

TimeRange = Literal["24h", "7d", "30d"]


class TimeBucket(CamelModel):
    bucket: str
    count: int


class HourCount(CamelModel):
    hour: int
    count: int


class CandidateActivity(CamelModel):
    candidate_id: UUID
    name: str
    position: str
    party: str | None = None
    total_votes: int
    recent_votes: int


class PositionActivity(CamelModel):
    position: str
    total_votes: int
    unique_voters: int


class DashboardOverview(CamelModel):
    total_votes: int
    total_users: int
    conversion_rate: float
    average_votes_per_user: float


class DashboardTrends(CamelModel):
    voting_trends: list[TimeBucket]
    hourly_pattern: list[HourCount]


class DashboardPerformance(CamelModel):
    top_candidates: list[CandidateActivity]
    position_analytics: list[PositionActivity]


class EngagementSummary(CamelModel):
    total_voters: int
    avg_votes_per_user: float
    avg_positions_per_user: float
    max_votes_by_user: int


class DashboardAnalytics(CamelModel):
    time_range: TimeRange
    overview: DashboardOverview
    trends: DashboardTrends
    performance: DashboardPerformance
    engagement: EngagementSummary


class CandidateComparison(CamelModel):
    candidate_id: UUID
    name: str
    vote_count: int
    percentage: float


class RoleCount(CamelModel):
    role: str
    count: int


class CandidatePerformance(CamelModel):
    total_votes: int
    recent_votes: int
    vote_history: list[TimeBucket]
    position_rank: int
    total_candidates_in_position: int
    percentage: float


class CandidateAnalytics(CamelModel):
    candidate_id: UUID
    name: str
    position: str
    party: str | None = None
    is_active: bool
    time_range: TimeRange
    performance: CandidatePerformance
    comparison: list[CandidateComparison]
    demographics: list[RoleCount] | None = None


class PositionCandidateStats(CamelModel):
    candidate_id: UUID
    name: str
    party: str | None = None
    total_votes: int
    recent_votes: int
    percentage: float
    vote_trend: list[TimeBucket]


class PositionOverview(CamelModel):
    total_candidates: int
    total_votes: int
    recent_votes: int
    unique_voters: int
    average_votes_per_candidate: float


class PositionAnalytics(CamelModel):
    position: str
    time_range: TimeRange
    overview: PositionOverview
    candidates: list[PositionCandidateStats]
    trends: list[TimeBucket]


class VoterBehavior(CamelModel):
    user_id: UUID
    username: str
    email: str
    role: str
    total_votes: int
    unique_positions: int
    unique_candidates: int
    voting_span_days: float
    first_vote: datetime
    last_vote: datetime


class BehaviorEngagement(CamelModel):
    total_voters: int
    average_votes_per_user: float
    average_positions_per_user: float
    most_active_user: str | None = None
    least_active_user: str | None = None


class FrequencyBucket(CamelModel):
    label: str
    count: int


class UserBehaviorAnalytics(CamelModel):
    time_range: TimeRange
    voters: list[VoterBehavior]
    engagement: BehaviorEngagement
    frequency_distribution: list[FrequencyBucket]


class RealtimeWindow(CamelModel):
    total_votes: int
    active_positions: int
    trending_candidates: int


class RealtimeSnapshot(CamelModel):
    last_24_hours: RealtimeWindow
    active_positions: list[PositionVoteCount]
    trending_candidates: list[CandidateActivity]
    timestamp: datetime

