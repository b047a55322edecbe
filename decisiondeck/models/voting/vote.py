# Standard library imports
import enum

# Third-party imports
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    text,
)

# Local application imports
from decisiondeck.models.base import Base
from decisiondeck.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class DeviceType(str, enum.Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"
    UNKNOWN = "unknown"


class Vote(Base, UUIDTimeStampMixin):
    __tablename__ = "votes"
    __table_args__ = (
        # One vote per voter per position, enforced by the database
        UniqueConstraint("voter_id", "position", name="unique_voter_position"),
        Index("ix_votes_position_created_at", "position", "created_at"),
        Index("ix_votes_candidate_created_at", "candidate_id", "created_at"),
    )

    voter_id = Column(Uuid, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(Uuid, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    position = Column(String(100), nullable=False)

    # Request metadata captured at cast time
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    device_type = Column(
        SQLEnum(DeviceType, name="device_type", values_callable=lambda kinds: [k.value for k in kinds]),
        default=DeviceType.UNKNOWN,
        nullable=False,
    )
    browser = Column(String(50), nullable=True)
    os = Column(String(50), nullable=True)

    is_valid = Column(Boolean, default=True, server_default=text("true"), nullable=False, index=True)
    invalidated_at = Column(DateTime(timezone=True), nullable=True)
