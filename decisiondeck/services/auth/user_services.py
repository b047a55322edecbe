# Standard library imports
from datetime import UTC, datetime
from uuid import UUID

# Third-party imports
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    UserNotFoundError,
    ValidationFailedError,
)
from decisiondeck.core.monitoring.logging import get_contextual_logger
from decisiondeck.db_selectors.auth import get_user_by_id, get_user_by_identifier, user_exists_by_email
from decisiondeck.models.auth.user import User, UserRole
from decisiondeck.schemas.auth import ChangePasswordRequest, UserListResponse, UserResponse, UserUpdateRequest
from decisiondeck.utils.model_utils import update_model_fields
from decisiondeck.utils.pagination_utils import count_rows, page_offset, total_pages
from decisiondeck.utils.password_utils import get_password_hash, verify_password


async def authenticate_user(db: AsyncSession, identifier: str, password: str) -> User:
    """
    Verify credentials given as email or username and stamp ``last_login``.

    Unknown accounts and wrong passwords produce the same error so the
    response does not reveal which accounts exist.
    """
    user = await get_user_by_identifier(db, identifier)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login = datetime.now(UTC)
    await db.commit()
    get_contextual_logger(__name__, user_id=user.id).info("User logged in")
    return user


async def require_user(db: AsyncSession, user_id: UUID) -> User:
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


async def update_profile(db: AsyncSession, user: User, data: UserUpdateRequest) -> User:
    if "email" in data.model_fields_set and data.email is None:
        raise ValidationFailedError("Email cannot be empty")
    if data.email is not None and await user_exists_by_email(db, data.email, exclude_id=user.id):
        raise ConflictError("Email is already registered")

    changed = update_model_fields(user, data)
    if changed:
        await db.commit()
        get_contextual_logger(__name__, user_id=user.id).info(f"Profile updated: {', '.join(changed)}")
    return user


async def change_password(db: AsyncSession, user: User, data: ChangePasswordRequest) -> None:
    if not verify_password(data.current_password, user.hashed_password):
        raise ValidationFailedError("Current password is incorrect")
    if data.current_password == data.new_password:
        raise ValidationFailedError("New password must differ from the current password")

    user.hashed_password = get_password_hash(data.new_password)
    await db.commit()
    get_contextual_logger(__name__, user_id=user.id).info("Password changed")


async def list_users(
    db: AsyncSession,
    page: int,
    page_size: int,
    role: UserRole | None = None,
    is_active: bool | None = None,
    search: str | None = None,
) -> UserListResponse:
    query = select(User)
    if role is not None:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active.is_(is_active))
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(User.username).like(pattern),
                User.email.like(pattern),
                func.lower(User.first_name).like(pattern),
                func.lower(User.last_name).like(pattern),
            )
        )

    total = await count_rows(db, query)
    result = await db.execute(
        query.order_by(User.created_at.desc()).offset(page_offset(page, page_size)).limit(page_size)
    )
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in result.scalars().all()],
        total_pages=total_pages(total, page_size),
        current_page=page,
        total=total,
    )


async def set_user_role(db: AsyncSession, actor: User, user_id: UUID, role: UserRole) -> User:
    user = await require_user(db, user_id)
    if user.id == actor.id and role != UserRole.ADMIN:
        raise AuthorizationError("Administrators cannot demote themselves")

    if user.role != role:
        user.role = role
        await db.commit()
        get_contextual_logger(__name__, user_id=user.id, actor_id=actor.id).info(f"Role set to {role.value}")
    return user


async def set_user_active(db: AsyncSession, actor: User, user_id: UUID, is_active: bool) -> User:
    """Activate or soft-deactivate an account; votes stay attached either way."""
    user = await require_user(db, user_id)
    if user.id == actor.id and not is_active:
        raise AuthorizationError("Administrators cannot deactivate themselves")

    if user.is_active != is_active:
        user.is_active = is_active
        await db.commit()
        state = "activated" if is_active else "deactivated"
        get_contextual_logger(__name__, user_id=user.id, actor_id=actor.id).info(f"User {state}")
    return user
