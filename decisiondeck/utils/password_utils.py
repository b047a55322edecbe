# Third-party imports
import bcrypt

# bcrypt only reads the first 72 bytes and current releases refuse longer input
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return encoded


def get_password_hash(password: str) -> str:
    """
    Hash ``password`` with a fresh bcrypt salt.
    """
    return bcrypt.hashpw(password=_encode(password), salt=bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against its stored hash.

    Input bcrypt cannot hash never matches.
    """
    try:
        candidate = _encode(plain_password)
    except ValueError:
        return False
    return bcrypt.checkpw(password=candidate, hashed_password=hashed_password.encode("utf-8"))
