"""Domain errors raised by the auth core.

Each error carries the HTTP status and machine-readable code the API boundary
reports. Services raise these; ``main.py`` turns them into JSON responses.
"""


class AuthError(Exception):
    """Base class for auth errors mapped to HTTP responses."""

    status_code: int = 400
    code: str = "AUTH_ERROR"
    default_message: str = "Authentication error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateField(AuthError):
    status_code = 400
    code = "DUPLICATE_FIELD"
    default_message = "Value already registered"

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"The {field} is already registered")


class InvalidCredentials(AuthError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class AccountLocked(AuthError):
    status_code = 401
    code = "ACCOUNT_LOCKED"
    default_message = "Account temporarily locked"


class InvalidRefreshToken(AuthError):
    status_code = 401
    code = "INVALID_REFRESH_TOKEN"
    default_message = "Invalid refresh token"


class UserNotFound(AuthError):
    status_code = 500
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class InvalidOrExpiredToken(AuthError):
    status_code = 400
    code = "INVALID_OR_EXPIRED_TOKEN"
    default_message = "Invalid or expired token"


class MissingToken(AuthError):
    status_code = 401
    code = "MISSING_TOKEN"
    default_message = "Access token required"


class TokenExpired(AuthError):
    status_code = 401
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class TokenInvalid(AuthError):
    """Token is malformed, forged, or signed with another secret."""

    status_code = 401
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class InvalidToken(TokenInvalid):
    """Raised by the request gate for any non-expiry verification failure."""


class InvalidUser(AuthError):
    status_code = 401
    code = "INVALID_USER"
    default_message = "Invalid user"


class Unauthenticated(AuthError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "User not authenticated"


class Forbidden(AuthError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class ConfigurationError(AuthError):
    status_code = 500
    code = "CONFIGURATION_ERROR"
    default_message = "Server is misconfigured"
