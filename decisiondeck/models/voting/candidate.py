# Third-party imports
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Uuid, text

# Local application imports
from decisiondeck.models.base import Base
from decisiondeck.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class Candidate(Base, UUIDTimeStampMixin):
    __tablename__ = "candidates"
    __table_args__ = (CheckConstraint("vote_count >= 0", name="candidate_vote_count_non_negative"),)

    name = Column(String(100), nullable=False)
    position = Column(String(100), nullable=False, index=True)
    party = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)

    # Inactive candidates keep their votes but are hidden from ballots and results
    is_active = Column(Boolean, default=True, server_default=text("true"), nullable=False, index=True)

    # Denormalised tally of valid votes, only changed through the vote ledger
    vote_count = Column(Integer, default=0, server_default=text("0"), nullable=False)
    last_vote_at = Column(DateTime(timezone=True), nullable=True)

    created_by_id = Column(Uuid, ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    def __str__(self) -> str:
        return f"Candidate: {self.name} ({self.position})"
