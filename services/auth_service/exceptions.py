"""
Session-level authentication errors.

Transport failures keep their `infrastructure.external.errors` types
(`NetworkError`, `UnauthorizedError`, ...); these cover what the session
manager itself decides.
"""


class AuthError(Exception):
    """Base class for session errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCredentialsError(AuthError):
    """The backend rejected the email/password pair"""

    def __init__(self, message: str = "Invalid email or password. Please try again."):
        super().__init__(message)


class NotAuthenticatedError(AuthError):
    """An operation that needs a token was called without one"""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NoRefreshTokenError(AuthError):
    """Refresh was requested but neither store holds a refresh token"""

    def __init__(self, message: str = "No refresh token available"):
        super().__init__(message)


class RefreshFailedError(AuthError):
    """The backend refused to exchange the refresh token"""

    def __init__(self, message: str = "Token refresh failed"):
        super().__init__(message)
