# Standard library imports
from collections.abc import Awaitable, Callable
from uuid import UUID

# Third-party imports
from fastapi import Depends, HTTPException, Request, WebSocket, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.core.exceptions import AuthenticationError
from decisiondeck.core.monitoring.logging import get_contextual_logger
from decisiondeck.db_selectors.auth import get_user_by_id
from decisiondeck.models.auth.user import User, UserRole
from decisiondeck.services.auth.token_services import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)

# Standard auth error responses
AUTH_ERROR_NO_TOKEN = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Access denied. No token provided.",
    headers={"WWW-Authenticate": "Bearer"},
)

AUTH_ERROR_USER_NOT_FOUND = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="User not found",
    headers={"WWW-Authenticate": "Bearer"},
)

AUTH_ERROR_USER_INACTIVE = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Account is deactivated",
    headers={"WWW-Authenticate": "Bearer"},
)

AUTH_ERROR_ADMIN_REQUIRED = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Admin privileges required",
)


def _extract_token(request: Request, bearer: str | None) -> str | None:
    return bearer or request.headers.get("x-auth-token")


async def resolve_user_from_token(db: AsyncSession, token: str) -> User:
    """
    Verify an access token and load its active account.

    Signature and expiry are checked by the token decoder; the account is
    re-read on every call so deactivation and role changes apply at once.
    """
    try:
        payload = decode_token(token, expected_type="access")  # nosec B106
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await get_user_by_id(db, UUID(payload["sub"]))
    if user is None:
        raise AUTH_ERROR_USER_NOT_FOUND
    if not user.is_active:
        get_contextual_logger(__name__, user_id=user.id).warning("Rejected token of deactivated account")
        raise AUTH_ERROR_USER_INACTIVE
    return user


def authenticated_user_only() -> Callable[[Request, str | None, AsyncSession], Awaitable[User]]:
    """
    Dependency for endpoints that require a *logged-in* user.

    Returns the `User` object.
    """

    async def _check_user(
        request: Request,
        token: str | None = Depends(oauth2_scheme),
        db: AsyncSession = Depends(get_async_session),
    ) -> User:
        token = _extract_token(request, token)
        if not token:
            raise AUTH_ERROR_NO_TOKEN
        return await resolve_user_from_token(db, token)

    return _check_user


def admin_only() -> Callable[[User], Awaitable[User]]:
    """
    Dependency for endpoints restricted to administrators.

    The role is read from the stored account rather than the token claim,
    so a demotion takes effect before the token expires.
    """

    async def _check_admin(user: User = Depends(authenticated_user_only())) -> User:
        if user.role != UserRole.ADMIN:
            get_contextual_logger(__name__, user_id=user.id).warning("Admin route refused")
            raise AUTH_ERROR_ADMIN_REQUIRED
        return user

    return _check_admin


def websocket_token(websocket: WebSocket) -> str | None:
    """
    Access token for a WebSocket handshake.

    Browsers cannot set headers on WebSocket requests, so the ``token``
    query parameter is accepted alongside ``Authorization: Bearer``.
    """
    auth_header = websocket.headers.get("authorization")
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
    return websocket.query_params.get("token")
