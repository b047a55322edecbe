# Standard library imports
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

# Third-party imports
import jwt

# Local application imports
from decisiondeck.core.exceptions import AuthenticationError
from decisiondeck.models.auth.user import User
from decisiondeck.schemas.auth import AccessTokenResponse, UserResponse
from decisiondeck.settings import settings


def _encode(user_id: UUID, email: str, role: str, token_type: str, expires_delta: timedelta) -> tuple[str, str]:
    now = datetime.now(UTC)
    jti = str(uuid4())
    to_encode = {
        "sub": str(user_id),  # Standard JWT claim for subject
        "email": email,
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
        "token_type": token_type,
        "jti": jti,  # JWT ID for tracking
    }
    token = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token, jti


def create_access_token(
    user_id: UUID,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """
    Create a JWT access token.

    Args:
        user_id: The user's ID
        email: The user's email
        role: The user's role at issue time
        expires_delta: Optional custom expiration time

    Returns:
        Tuple of (token, jti)
    """
    expires_delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(user_id, email, role, "access", expires_delta)  # nosec B106


def create_refresh_token(
    user_id: UUID,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """
    Create a JWT refresh token with a longer expiration time.

    Returns:
        Tuple of (token, jti)
    """
    expires_delta = expires_delta or timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    return _encode(user_id, email, role, "refresh", expires_delta)  # nosec B106


def decode_token(token: str, expected_type: str) -> dict[str, Any]:
    """
    Verify signature and expiry of ``token`` and check its type.

    Raises:
        AuthenticationError: if the token is expired, malformed or of another type
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    if payload.get("token_type") != expected_type:
        raise AuthenticationError("Invalid token type")
    if not payload.get("sub") or not payload.get("jti"):
        raise AuthenticationError("Invalid or expired token")
    try:
        UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid or expired token")
    return payload


def generate_auth_tokens(user: User) -> AccessTokenResponse:
    """Issue an access/refresh token pair for ``user``."""
    role = user.role.value
    access_token, _ = create_access_token(user_id=user.id, email=user.email, role=role)
    refresh_token, _ = create_refresh_token(user_id=user.id, email=user.email, role=role)
    return AccessTokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",  # nosec B106
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )
