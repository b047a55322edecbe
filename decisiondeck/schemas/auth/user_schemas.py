# Standard library imports
from datetime import datetime
import re
from typing import Annotated, Self
from uuid import UUID

# Third-party imports
from pydantic import AfterValidator, EmailStr, Field, model_validator

# Local application imports
from decisiondeck.models.auth.user import UserRole
from decisiondeck.schemas.common import CamelModel
from decisiondeck.utils.password_utils import MAX_PASSWORD_BYTES

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
MIN_PASSWORD_LENGTH = 6


def validate_username(value: str) -> str:
    value = value.strip()
    if not 3 <= len(value) <= 30:
        raise ValueError("Username must be between 3 and 30 characters")
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username can only contain letters, numbers, and underscores")
    return value


def validate_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


NewPassword = Annotated[str, Field(min_length=MIN_PASSWORD_LENGTH), AfterValidator(validate_password_bytes)]


class UserResponse(CamelModel):
    """Public view of an account."""

    id: UUID
    username: str
    email: str
    role: UserRole
    is_active: bool
    first_name: str | None = None
    last_name: str | None = None
    total_votes: int = 0
    positions_voted: int = 0
    last_vote_at: datetime | None = None
    last_login: datetime | None = None
    created_at: datetime


class UserListResponse(CamelModel):
    users: list[UserResponse]
    total_pages: int
    current_page: int
    total: int


# ============================
# ----- Request schemas ------
# ============================


class RegisterRequest(CamelModel):
    username: Annotated[str, AfterValidator(validate_username)]
    email: EmailStr
    password: NewPassword
    confirm_password: str | None = None
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)

    @model_validator(mode="after")
    def check_passwords(self) -> Self:
        if self.confirm_password is not None and self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "jane_doe",
                "email": "jane@example.com",
                "password": "secret123",
                "confirmPassword": "secret123",
            }
        }
    }


class UserUpdateRequest(CamelModel):
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    email: EmailStr | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: NewPassword


class UserRoleUpdateRequest(CamelModel):
    role: UserRole


class UserStatusUpdateRequest(CamelModel):
    is_active: bool
