# Standard library imports
from datetime import datetime
from typing import Annotated
from uuid import UUID

# Third-party imports
from pydantic import StringConstraints

# Local application imports
from decisiondeck.schemas.common import CamelModel

IMAGE_URL_PATTERN = r"(?i)^https?://.+\.(jpg|jpeg|png|gif|webp)(\?.*)?$"

PositionLabel = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
CandidateName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]

PartyLabel = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
DescriptionText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
ImageUrl = Annotated[str, StringConstraints(strip_whitespace=True, max_length=500, pattern=IMAGE_URL_PATTERN)]


class CandidateCreateRequest(CamelModel):
    name: CandidateName
    position: PositionLabel
    party: PartyLabel | None = None
    description: DescriptionText | None = None
    image_url: ImageUrl | None = None


class CandidateUpdateRequest(CamelModel):
    name: CandidateName | None = None
    position: PositionLabel | None = None
    party: PartyLabel | None = None
    description: DescriptionText | None = None
    image_url: ImageUrl | None = None
    is_active: bool | None = None


class CandidateResponse(CamelModel):
    id: UUID
    name: str
    position: str
    party: str | None = None
    description: str | None = None
    image_url: str | None = None
    is_active: bool
    vote_count: int
    last_vote_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CandidateDetailResponse(CandidateResponse):
    """Candidate with stats derived from the rest of its position."""

    percentage: float = 0.0
    position_rank: int | None = None
    total_candidates_in_position: int = 0


class CandidateListResponse(CamelModel):
    candidates: list[CandidateResponse]
    total_pages: int
    current_page: int
    total: int


class PositionCandidateCount(CamelModel):
    position: str
    candidate_count: int
    total_votes: int


class CandidateStatsOverview(CamelModel):
    total_candidates: int
    active_candidates: int
    total_positions: int
    positions: list[PositionCandidateCount]
