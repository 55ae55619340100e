class EventPassError(Exception):
    """Base for errors reported back to the caller.

    ``status`` is the HTTP status the API answers with; ``message`` the default
    user-facing text.
    """

    status = 400
    message = "Bad request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NotFound(EventPassError):
    status = 404
    message = "Not found"


class Unauthorized(EventPassError):
    status = 401
    message = "Access token required"


class Forbidden(EventPassError):
    status = 403
    message = "Insufficient permissions"
