"""
Error taxonomy for the auth service.

Every error carries the HTTP status it maps to and a client-safe message.
"""


class AuthServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None, status_code: int = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """Missing or malformed input."""
    status_code = 400
    default_message = "Invalid request"


class Conflict(AuthServiceError):
    status_code = 409
    default_message = "Email already registered"


class Unauthorized(AuthServiceError):
    """Bad credentials, or a rejected reset token (reported as 400)."""
    status_code = 401
    default_message = "Invalid email or password"


class NotFound(AuthServiceError):
    status_code = 404
    default_message = "Not found"


class InternalError(AuthServiceError):
    status_code = 500
    default_message = "Internal server error"
