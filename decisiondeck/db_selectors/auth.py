# Standard library imports
from uuid import UUID

# Third-party imports
from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.models.auth.user import User


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_user_by_identifier(db: AsyncSession, identifier: str) -> User | None:
    """Look a user up by email or username (usernames compare case-insensitively)."""
    identifier = identifier.strip()
    result = await db.execute(
        select(User).where(
            or_(
                User.email == identifier.lower(),
                func.lower(User.username) == identifier.lower(),
            )
        )
    )
    return result.scalars().first()


async def user_exists_by_email(db: AsyncSession, email: str, exclude_id: UUID | None = None) -> bool:
    condition = User.email == email.strip().lower()
    if exclude_id is not None:
        condition = condition & (User.id != exclude_id)
    result = await db.execute(select(exists().where(condition)))
    return bool(result.scalar())


async def user_exists_by_username(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(exists().where(func.lower(User.username) == username.strip().lower())))
    return bool(result.scalar())
