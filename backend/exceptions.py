from typing import Optional


class ApiError(Exception):
    """A failure with a client-facing message and HTTP status.

    ``detail`` is internal (e.g. the database error text) and is only shown
    to clients outside production.
    """
    status_code = 500
    message = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = 401
    message = "Access denied. No token provided."


class Forbidden(ApiError):
    status_code = 403
    message = "Access denied. Insufficient permissions."


class Conflict(ApiError):
    status_code = 400
    message = "Already exists"


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid credentials"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class BadRequest(ApiError):
    status_code = 400
    message = "Bad request"


class ServerError(ApiError):
    pass
