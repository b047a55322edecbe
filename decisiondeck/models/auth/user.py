# Standard library imports
from datetime import datetime
import enum

# Third-party imports
from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, validates

# Local application imports
from decisiondeck.models.base import Base
from decisiondeck.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class UserRole(str, enum.Enum):
    VOTER = "voter"
    ADMIN = "admin"


class User(UUIDTimeStampMixin, Base):
    __tablename__ = "user"

    username: Mapped[str] = mapped_column(String(30), index=True, unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        default=UserRole.VOTER,
        server_default=UserRole.VOTER.value,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=text("true"), nullable=False)

    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Participation counters, maintained by the vote ledger
    total_votes: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"), nullable=False)
    positions_voted: Mapped[int] = mapped_column(Integer, default=0, server_default=text("0"), nullable=False)
    last_vote_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Last login timestamp",
    )

    @validates("email")
    def normalize_email(self, key: str, value: str) -> str:
        return value.strip().lower()

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __str__(self) -> str:
        return f"User: {self.username} - {self.email}"
