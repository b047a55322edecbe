# Third-party imports
from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import HTTPConnection

# Local application imports
from decisiondeck.api.internal.utils.permissions import admin_only, authenticated_user_only
from decisiondeck.core.exceptions import RateLimitExceededError
from decisiondeck.core.monitoring.logging import get_contextual_logger
from decisiondeck.core.realtime import RoomManager
from decisiondeck.models.auth.user import User
from decisiondeck.settings import settings
from decisiondeck.utils.rate_limiter import AddressRateLimiter
from decisiondeck.utils.request_utils import get_client_address

get_current_user = authenticated_user_only()
get_current_admin = admin_only()


def get_room_manager(connection: HTTPConnection) -> RoomManager:
    return connection.app.state.room_manager


def get_session_factory(connection: HTTPConnection) -> async_sessionmaker[AsyncSession]:
    """Session factory for work outside a request scope, such as a long-lived WebSocket."""
    return connection.app.state.session_factory


def get_auth_rate_limiter(request: Request) -> AddressRateLimiter:
    return request.app.state.auth_rate_limiter


def get_api_rate_limiter(request: Request) -> AddressRateLimiter:
    return request.app.state.api_rate_limiter


def _count_hit(limiter: AddressRateLimiter, request: Request, message: str) -> None:
    client_address = get_client_address(request)
    outcome = limiter.hit(client_address)
    if not outcome.allowed:
        get_contextual_logger(__name__, client=client_address, scope=limiter.scope).warning("Rate limit hit")
        raise RateLimitExceededError(retry_after=outcome.retry_after, message=message)


async def auth_rate_limit(
    request: Request,
    limiter: AddressRateLimiter = Depends(get_auth_rate_limiter),
) -> None:
    """Count an authentication attempt against the caller's address."""
    _count_hit(limiter, request, "Too many authentication attempts. Please try again later.")


async def api_rate_limit(
    request: Request,
    limiter: AddressRateLimiter = Depends(get_api_rate_limiter),
) -> None:
    _count_hit(limiter, request, "Too many requests from this address. Please try again later.")


class PageParams:
    """Shared ``page``/``limit`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.limit = limit


__all__ = [
    "PageParams",
    "User",
    "api_rate_limit",
    "auth_rate_limit",
    "get_api_rate_limiter",
    "get_auth_rate_limiter",
    "get_current_admin",
    "get_current_user",
    "get_room_manager",
    "get_session_factory",
]
