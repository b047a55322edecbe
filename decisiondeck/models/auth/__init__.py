# Local application imports
from decisiondeck.models.auth.user import User, UserRole

__all__ = ["User", "UserRole"]
