# Standard library imports
from uuid import UUID

# Third-party imports
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from decisiondeck.core.db import get_async_session
from decisiondeck.core.exceptions import AuthenticationError
from decisiondeck.db_selectors.auth import get_user_by_id
from decisiondeck.dependancies.common import auth_rate_limit, get_current_user
from decisiondeck.models.auth.user import User
from decisiondeck.schemas.auth import (
    AccessTokenResponse,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserResponse,
    UserUpdateRequest,
)
from decisiondeck.schemas.common import MessageResponse
from decisiondeck.services.auth import authenticate_user, decode_token, generate_auth_tokens, register_user
from decisiondeck.services.auth.user_services import change_password, update_profile

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
async def register(data: RegisterRequest, db: AsyncSession = Depends(get_async_session)):
    """Create a voter account and log it in"""
    user = await register_user(db, data)
    return generate_auth_tokens(user)


@router.post("/login", response_model=AccessTokenResponse, dependencies=[Depends(auth_rate_limit)])
async def login(data: LoginRequest, db: AsyncSession = Depends(get_async_session)):
    """Exchange email/username and password for tokens"""
    user = await authenticate_user(db, data.identifier, data.password)
    return generate_auth_tokens(user)


@router.post("/token/refresh", response_model=AccessTokenResponse)
async def refresh_token(data: RefreshTokenRequest, db: AsyncSession = Depends(get_async_session)):
    """Issue a fresh token pair from a refresh token"""
    payload = decode_token(data.refresh_token, expected_type="refresh")  # nosec B106
    user = await get_user_by_id(db, UUID(payload["sub"]))
    if user is None or not user.is_active:
        raise AuthenticationError("Account not found or deactivated")
    return generate_auth_tokens(user)


@router.get("/me", response_model=UserResponse)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update own name or email"""
    return await update_profile(db, current_user, data)


@router.put("/me/password", response_model=MessageResponse)
async def update_my_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await change_password(db, current_user, data)
    return MessageResponse(message="Password updated successfully")
