"""
Error taxonomy shared by components and the HTTP boundary.

Components raise these; the API translates them to status codes with the
user-facing message. Anything else is an unexpected failure (500).
"""


class BlogError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, field: str | None = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class ValidationError(BlogError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(BlogError):
    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(BlogError):
    status_code = 403
    default_message = "Access denied"


class NotFoundError(BlogError):
    status_code = 404
    default_message = "Not found"


class ConflictError(BlogError):
    status_code = 409
    default_message = "Conflict"


class RateLimitedError(BlogError):
    status_code = 429
    default_message = "Too many requests, please try again later"
