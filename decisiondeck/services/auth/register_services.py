# Third-party imports
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.exceptions import ConflictError
from decisiondeck.core.monitoring.logging import get_logger
from decisiondeck.db_selectors.auth import user_exists_by_email, user_exists_by_username
from decisiondeck.models.auth.user import User, UserRole
from decisiondeck.schemas.auth import RegisterRequest
from decisiondeck.utils.password_utils import get_password_hash

logger = get_logger(__name__)


async def register_user(db: AsyncSession, data: RegisterRequest, role: UserRole = UserRole.VOTER) -> User:
    """
    Create a new account.

    Raises:
        ConflictError: if the username or email is already taken
    """
    if await user_exists_by_username(db, data.username):
        raise ConflictError("Username is already taken")
    if await user_exists_by_email(db, data.email):
        raise ConflictError("Email is already registered")

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        role=role,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same handle
        await db.rollback()
        raise ConflictError("Username or email is already registered")

    logger.info(f"Registered user {user.username} ({user.id})")
    return user
