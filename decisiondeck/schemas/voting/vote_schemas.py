# Standard library imports
from datetime import datetime
from uuid import UUID

# Third-party imports
from pydantic import Field

# Local application imports
from decisiondeck.models.voting.vote import DeviceType
from decisiondeck.schemas.common import CamelModel
from decisiondeck.schemas.voting.candidate_schemas import PositionLabel

# ============================
# ----- Request schemas ------
# ============================


class CastVoteRequest(CamelModel):
    candidate_id: UUID
    position: PositionLabel

    model_config = {
        "json_schema_extra": {
            "example": {"candidateId": "123e4567-e89b-12d3-a456-426614174000", "position": "President"}
        }
    }


# ============================
# ----- Response schemas -----
# ============================


class VoteReceipt(CamelModel):
    """Outcome of a successful cast."""

    vote_id: UUID
    position: str
    candidate_id: UUID
    new_count: int
    timestamp: datetime


class VoteInvalidationResponse(CamelModel):
    vote_id: UUID
    candidate_id: UUID
    position: str
    is_valid: bool
    new_count: int
    invalidated_at: datetime | None = None


class CandidateRef(CamelModel):
    id: UUID
    name: str
    party: str | None = None
    position: str


class VoteHistoryItem(CamelModel):
    id: UUID
    position: str
    candidate: CandidateRef | None = None
    device_type: DeviceType
    browser: str | None = None
    os: str | None = None
    is_valid: bool
    created_at: datetime


class VoteHistoryResponse(CamelModel):
    votes: list[VoteHistoryItem]
    total_pages: int
    current_page: int
    total: int


class CandidateResult(CamelModel):
    candidate_id: UUID
    name: str
    party: str | None = None
    image_url: str | None = None
    vote_count: int
    percentage: float


class PositionResults(CamelModel):
    position: str
    results: list[CandidateResult]
    total_votes: int
    total_candidates: int


class PositionVoteCount(CamelModel):
    position: str
    vote_count: int


class OverviewStats(CamelModel):
    total_votes: int
    total_positions: int
    recent_votes: int
    top_positions: list[PositionVoteCount]


class DailyVoteCount(CamelModel):
    date: str
    count: int


class AdminStats(CamelModel):
    total_votes: int
    valid_votes: int
    invalid_votes: int
    votes_by_position: list[PositionVoteCount]
    daily_votes: list[DailyVoteCount]
    start_date: datetime | None = None
    end_date: datetime | None = None


class RecountResponse(CamelModel):
    candidate_id: UUID
    previous_count: int
    vote_count: int = Field(..., ge=0)
