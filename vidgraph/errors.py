"""Typed failures raised by the engagement core.

Every failure carries the HTTP status and stable error code the API layer
renders, so services never import FastAPI.
"""

from typing import Optional


class VidgraphError(Exception):
    """Base class for failures surfaced to callers."""

    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgument(VidgraphError):
    status_code = 400
    error_code = "INVALID_ARGUMENT"
    default_message = "Invalid or missing argument"


class NotFound(VidgraphError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class Forbidden(VidgraphError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "You do not have access to this resource"


class Conflict(VidgraphError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Request conflicts with the current state"


class InvalidOperation(Conflict):
    """A request that can never succeed for this actor, e.g. self-subscription."""

    status_code = 400
    error_code = "INVALID_OPERATION"
    default_message = "Operation not allowed"


class InvalidCredentials(VidgraphError):
    status_code = 401
    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid user credentials"


class InvalidToken(VidgraphError):
    status_code = 401
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpired(InvalidToken):
    error_code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class TokenReused(VidgraphError):
    """A refresh token that was already rotated away was presented again."""

    status_code = 401
    error_code = "TOKEN_REUSED"
    default_message = "Refresh token has already been used, please log in again"


class StoreUnavailable(VidgraphError):
    status_code = 503
    error_code = "STORE_UNAVAILABLE"
    default_message = "Data store is temporarily unavailable"


class Unknown(VidgraphError):
    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "Internal server error"
