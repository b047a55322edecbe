# Local application imports
from decisiondeck.schemas.auth.token_schemas import AccessTokenResponse, LoginRequest, RefreshTokenRequest
from decisiondeck.schemas.auth.user_schemas import (
    ChangePasswordRequest,
    RegisterRequest,
    UserListResponse,
    UserResponse,
    UserRoleUpdateRequest,
    UserStatusUpdateRequest,
    UserUpdateRequest,
)

__all__ = [
    "AccessTokenResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "UserListResponse",
    "UserResponse",
    "UserRoleUpdateRequest",
    "UserStatusUpdateRequest",
    "UserUpdateRequest",
]
