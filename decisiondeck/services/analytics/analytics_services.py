"""
Analytics over the vote ledger.

Every call recomputes from raw vote rows in its time window. Windows are
fetched once and grouped in Python so the same code serves PostgreSQL and
SQLite; vote volumes are expected to stay small enough for that.
Only valid votes are counted.
"""

# Standard library imports
from collections import Counter, defaultdict
from datetime import UTC, datetime
from uuid import UUID

# Third-party imports
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import CandidateNotFoundError, NotFoundError
from decisiondeck.db_selectors.voting import get_active_candidates_for_position, get_candidate_by_id
from decisiondeck.models.auth.user import User
from decisiondeck.models.voting.candidate import Candidate
from decisiondeck.models.voting.vote import Vote
from decisiondeck.schemas.analytics.analytics_schemas import (
    BehaviorEngagement,
    CandidateActivity,
    CandidateAnalytics,
    CandidateComparison,
    CandidatePerformance,
    DashboardAnalytics,
    DashboardOverview,
    DashboardPerformance,
    DashboardTrends,
    EngagementSummary,
    FrequencyBucket,
    HourCount,
    PositionActivity,
    PositionAnalytics,
    PositionCandidateStats,
    PositionOverview,
    RealtimeSnapshot,
    RealtimeWindow,
    RoleCount,
    TimeBucket,
    TimeRange,
    UserBehaviorAnalytics,
    VoterBehavior,
)
from decisiondeck.schemas.voting.vote_schemas import PositionVoteCount
from decisiondeck.utils.stats_utils import (
    as_utc,
    average,
    bucket_counts,
    bucket_format,
    hour_of_day_counts,
    share,
    window_start,
)

TOP_CANDIDATES_LIMIT = 10
REALTIME_LIMIT = 5
FREQUENCY_LABELS = ("1 vote", "2-3 votes", "4-5 votes", "5+ votes")


def _buckets(timestamps: list[datetime], time_range: TimeRange) -> list[TimeBucket]:
    return [TimeBucket(bucket=key, count=count) for key, count in bucket_counts(timestamps, bucket_format(time_range))]


def _frequency_label(votes: int) -> str:
    if votes <= 1:
        return "1 vote"
    if votes <= 3:
        return "2-3 votes"
    if votes <= 5:
        return "4-5 votes"
    return "5+ votes"


def _rank(candidate: Candidate, field: list[Candidate]) -> int:
    return 1 + sum(1 for other in field if other.id != candidate.id and other.vote_count > candidate.vote_count)


async def dashboard_analytics(db: AsyncSession, time_range: TimeRange = "7d") -> DashboardAnalytics:
    since = window_start(time_range)
    rows = (
        await db.execute(
            select(Vote.voter_id, Vote.candidate_id, Vote.position, Vote.created_at).where(
                Vote.is_valid.is_(True), Vote.created_at >= since
            )
        )
    ).all()
    active_users = (await db.execute(select(func.count(User.id)).where(User.is_active.is_(True)))).scalar_one()

    timestamps = [row.created_at for row in rows]
    votes_per_voter = Counter(row.voter_id for row in rows)
    positions_per_voter: dict[UUID, set[str]] = defaultdict(set)
    for row in rows:
        positions_per_voter[row.voter_id].add(row.position)

    recent_by_candidate = Counter(row.candidate_id for row in rows)
    candidates = (
        await db.execute(
            select(Candidate).where(Candidate.is_active.is_(True)).execution_options(populate_existing=True)
        )
    ).scalars().all()
    top_candidates = sorted(
        candidates,
        key=lambda c: (-recent_by_candidate.get(c.id, 0), -c.vote_count, c.name),
    )[:TOP_CANDIDATES_LIMIT]

    position_votes = Counter(row.position for row in rows)
    position_voters: dict[str, set[UUID]] = defaultdict(set)
    for row in rows:
        position_voters[row.position].add(row.voter_id)

    voters = len(votes_per_voter)
    return DashboardAnalytics(
        time_range=time_range,
        overview=DashboardOverview(
            total_votes=len(rows),
            total_users=active_users,
            conversion_rate=share(len(rows), active_users),
            average_votes_per_user=average(len(rows), voters),
        ),
        trends=DashboardTrends(
            voting_trends=_buckets(timestamps, time_range),
            hourly_pattern=[HourCount(hour=hour, count=count) for hour, count in hour_of_day_counts(timestamps)],
        ),
        performance=DashboardPerformance(
            top_candidates=[
                CandidateActivity(
                    candidate_id=c.id,
                    name=c.name,
                    position=c.position,
                    party=c.party,
                    total_votes=c.vote_count,
                    recent_votes=recent_by_candidate.get(c.id, 0),
                )
                for c in top_candidates
            ],
            position_analytics=[
                PositionActivity(position=position, total_votes=count, unique_voters=len(position_voters[position]))
                for position, count in sorted(position_votes.items(), key=lambda item: (-item[1], item[0]))
            ],
        ),
        engagement=EngagementSummary(
            total_voters=voters,
            avg_votes_per_user=average(len(rows), voters),
            avg_positions_per_user=average(sum(len(p) for p in positions_per_voter.values()), voters),
            max_votes_by_user=max(votes_per_voter.values(), default=0),
        ),
    )


async def candidate_analytics(
    db: AsyncSession,
    candidate_id: UUID,
    time_range: TimeRange = "30d",
    include_demographics: bool = False,
) -> CandidateAnalytics:
    """History and standing of one candidate; voter demographics only when asked (admins)."""
    candidate = await get_candidate_by_id(db, candidate_id, refresh=True)
    if candidate is None:
        raise CandidateNotFoundError()

    field = await get_active_candidates_for_position(db, candidate.position)
    if candidate.id not in {c.id for c in field}:
        field.append(candidate)
    total = sum(c.vote_count for c in field if c.is_active)

    rows = (
        await db.execute(
            select(Vote.created_at, User.role)
            .join(User, User.id == Vote.voter_id)
            .where(
                Vote.candidate_id == candidate_id,
                Vote.is_valid.is_(True),
                Vote.created_at >= window_start(time_range),
            )
        )
    ).all()

    demographics = None
    if include_demographics:
        roles = Counter(getattr(row.role, "value", row.role) for row in rows)
        demographics = [RoleCount(role=role, count=count) for role, count in sorted(roles.items())]

    return CandidateAnalytics(
        candidate_id=candidate.id,
        name=candidate.name,
        position=candidate.position,
        party=candidate.party,
        is_active=candidate.is_active,
        time_range=time_range,
        performance=CandidatePerformance(
            total_votes=candidate.vote_count,
            recent_votes=len(rows),
            vote_history=_buckets([row.created_at for row in rows], time_range),
            position_rank=_rank(candidate, field),
            total_candidates_in_position=len(field),
            percentage=share(candidate.vote_count, total) if candidate.is_active else 0.0,
        ),
        comparison=[
            CandidateComparison(
                candidate_id=c.id,
                name=c.name,
                vote_count=c.vote_count,
                percentage=share(c.vote_count, total) if c.is_active else 0.0,
            )
            for c in sorted(field, key=lambda c: (-c.vote_count, c.name))
        ],
        demographics=demographics,
    )


async def position_analytics(db: AsyncSession, position: str, time_range: TimeRange = "7d") -> PositionAnalytics:
    position = position.strip()
    candidates = await get_active_candidates_for_position(db, position)
    if not candidates:
        raise NotFoundError(f"No active candidates for position {position!r}")

    rows = (
        await db.execute(
            select(Vote.candidate_id, Vote.voter_id, Vote.created_at).where(
                Vote.position == position,
                Vote.is_valid.is_(True),
                Vote.created_at >= window_start(time_range),
            )
        )
    ).all()
    timestamps_by_candidate: dict[UUID, list[datetime]] = defaultdict(list)
    for row in rows:
        timestamps_by_candidate[row.candidate_id].append(row.created_at)

    total = sum(c.vote_count for c in candidates)
    return PositionAnalytics(
        position=position,
        time_range=time_range,
        overview=PositionOverview(
            total_candidates=len(candidates),
            total_votes=total,
            recent_votes=len(rows),
            unique_voters=len({row.voter_id for row in rows}),
            average_votes_per_candidate=average(total, len(candidates)),
        ),
        candidates=[
            PositionCandidateStats(
                candidate_id=c.id,
                name=c.name,
                party=c.party,
                total_votes=c.vote_count,
                recent_votes=len(timestamps_by_candidate.get(c.id, [])),
                percentage=share(c.vote_count, total),
                vote_trend=_buckets(timestamps_by_candidate.get(c.id, []), time_range),
            )
            for c in candidates
        ],
        trends=_buckets([row.created_at for row in rows], time_range),
    )


async def user_behavior_analytics(db: AsyncSession, time_range: TimeRange = "30d") -> UserBehaviorAnalytics:
    rows = (
        await db.execute(
            select(
                Vote.voter_id,
                Vote.position,
                Vote.candidate_id,
                Vote.created_at,
                User.username,
                User.email,
                User.role,
            )
            .join(User, User.id == Vote.voter_id)
            .where(Vote.is_valid.is_(True), Vote.created_at >= window_start(time_range))
        )
    ).all()

    grouped: dict[UUID, list] = defaultdict(list)
    for row in rows:
        grouped[row.voter_id].append(row)

    voters = []
    for voter_id, votes in grouped.items():
        first = min(as_utc(v.created_at) for v in votes)
        last = max(as_utc(v.created_at) for v in votes)
        sample = votes[0]
        voters.append(
            VoterBehavior(
                user_id=voter_id,
                username=sample.username,
                email=sample.email,
                role=getattr(sample.role, "value", sample.role),
                total_votes=len(votes),
                unique_positions=len({v.position for v in votes}),
                unique_candidates=len({v.candidate_id for v in votes}),
                voting_span_days=round((last - first).total_seconds() / 86400, 2),
                first_vote=first,
                last_vote=last,
            )
        )
    voters.sort(key=lambda v: (-v.total_votes, v.username))

    frequency = Counter(_frequency_label(v.total_votes) for v in voters)
    return UserBehaviorAnalytics(
        time_range=time_range,
        voters=voters,
        engagement=BehaviorEngagement(
            total_voters=len(voters),
            average_votes_per_user=average(len(rows), len(voters)),
            average_positions_per_user=average(sum(v.unique_positions for v in voters), len(voters)),
            most_active_user=voters[0].username if voters else None,
            least_active_user=voters[-1].username if voters else None,
        ),
        frequency_distribution=[FrequencyBucket(label=label, count=frequency.get(label, 0)) for label in FREQUENCY_LABELS],
    )


async def realtime_snapshot(db: AsyncSession) -> RealtimeSnapshot:
    now = datetime.now(UTC)
    rows = (
        await db.execute(
            select(Vote.candidate_id, Vote.position).where(
                Vote.is_valid.is_(True), Vote.created_at >= window_start("24h", now)
            )
        )
    ).all()

    by_position = Counter(row.position for row in rows)
    by_candidate = Counter(row.candidate_id for row in rows)
    trending_ids = [cid for cid, _ in sorted(by_candidate.items(), key=lambda item: (-item[1], str(item[0])))][
        :REALTIME_LIMIT
    ]

    trending = []
    if trending_ids:
        found = (
            await db.execute(
                select(Candidate).where(Candidate.id.in_(trending_ids)).execution_options(populate_existing=True)
            )
        ).scalars().all()
        by_id = {c.id: c for c in found}
        trending = [
            CandidateActivity(
                candidate_id=cid,
                name=by_id[cid].name,
                position=by_id[cid].position,
                party=by_id[cid].party,
                total_votes=by_id[cid].vote_count,
                recent_votes=by_candidate[cid],
            )
            for cid in trending_ids
            if cid in by_id
        ]

    return RealtimeSnapshot(
        last_24_hours=RealtimeWindow(
            total_votes=len(rows),
            active_positions=len(by_position),
            trending_candidates=len(by_candidate),
        ),
        active_positions=[
            PositionVoteCount(position=position, vote_count=count)
            for position, count in sorted(by_position.items(), key=lambda item: (-item[1], item[0]))[:REALTIME_LIMIT]
        ],
        trending_candidates=trending,
        timestamp=now,
    )
