"""
Database models package.

Importing this package registers every table on ``Base.metadata``.
"""

# Local application imports
from decisiondeck.models.auth import User, UserRole
from decisiondeck.models.base import Base
from decisiondeck.models.voting import Candidate, DeviceType, Vote

__all__ = [
    "Base",
    # Authentication models
    "User",
    "UserRole",
    # Voting models
    "Candidate",
    "DeviceType",
    "Vote",
]
