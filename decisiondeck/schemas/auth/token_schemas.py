# Third-party imports
from pydantic import Field

# Local application imports
from decisiondeck.schemas.auth.user_schemas import UserResponse
from decisiondeck.schemas.common import CamelModel

# ============================
# ----- Request schemas ------
# ============================


class LoginRequest(CamelModel):
    """Login by email or username."""

    identifier: str = Field(..., min_length=1, description="Email address or username")
    password: str = Field(..., min_length=1)

    model_config = {"json_schema_extra": {"example": {"identifier": "jane@example.com", "password": "secret123"}}}


class RefreshTokenRequest(CamelModel):
    refresh_token: str

    model_config = {"json_schema_extra": {"example": {"refreshToken": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"}}}


# ============================
# ----- Response schemas -----
# ============================


class AccessTokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"  # nosec B105
    expires_in: int
    user: UserResponse
