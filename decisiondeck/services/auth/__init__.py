# Local application imports
from decisiondeck.services.auth.register_services import register_user
from decisiondeck.services.auth.token_services import (
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_auth_tokens,
)
from decisiondeck.services.auth.user_services import authenticate_user

__all__ = [
    "authenticate_user",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "generate_auth_tokens",
    "register_user",
]
