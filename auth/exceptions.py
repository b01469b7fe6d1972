"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class InvalidCredentialsError(AuthError):
    """
    Email/password combination did not match.

    Raised for unknown emails as well, so responses don't reveal
    which emails are registered.
    """


class InvalidTokenError(AuthError):
    """Bearer token is malformed, expired, or signed with another key."""


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class UserInactiveError(AuthError):
    """User account is deactivated. Login not permitted."""


class PermissionDeniedError(AuthError):
    """Authenticated caller lacks the role or ownership required."""


class WeakPasswordError(ValueError):
    """Password does not meet the minimum length policy."""

    code = "WEAK_PASSWORD"


class UserAlreadyExistsError(ValueError):
    """Email is already registered."""

    code = "ALREADY_EXISTS"
