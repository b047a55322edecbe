"""
Domain exceptions.

Services raise these and ``register_exception_handlers`` turns them into the
common error envelope with the matching HTTP status.
"""

# Standard library imports
from typing import Any


class AppError(Exception):
    status_code: int = 500
    code: str = "internal_server_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationFailedError(AppError):
    status_code = 400
    code = "validation_error"
    message = "Invalid request data"


class PositionMismatchError(ValidationFailedError):
    code = "position_mismatch"
    message = "Candidate position does not match"


class AuthenticationError(AppError):
    status_code = 401
    code = "unauthorized"
    message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    code = "forbidden"
    message = "You do not have permission to perform this action"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    message = "Resource not found"


class CandidateNotFoundError(NotFoundError):
    code = "candidate_not_found"
    message = "Candidate not found"


class CandidateInactiveError(NotFoundError):
    code = "candidate_inactive"
    message = "Candidate not found or inactive"


class VoteNotFoundError(NotFoundError):
    code = "vote_not_found"
    message = "Vote not found"


class UserNotFoundError(NotFoundError):
    code = "user_not_found"
    message = "User not found"


class ConflictError(AppError):
    status_code = 409
    code = "conflict"
    message = "Resource already exists"


class DuplicateVoteError(ConflictError):
    # Reported as 400 to match the public voting contract
    status_code = 400
    code = "duplicate_vote"
    message = "You have already voted for this position"


class RateLimitExceededError(AppError):
    status_code = 429
    code = "too_many_requests"
    message = "Too many attempts, please try again later"

    def __init__(self, retry_after: int, message: str | None = None):
        self.retry_after = retry_after
        super().__init__(message, details={"retryAfter": retry_after})


class StorageError(AppError):
    status_code = 500
    code = "storage_unavailable"
    message = "The data store is currently unavailable"
