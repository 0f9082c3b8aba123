"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class InvalidTelegramAuthError(AuthError):
    """
    Telegram login claim failed verification.

    Covers both a bad signature and a claim older than the freshness window.
    The two are deliberately not distinguished to the client.
    """


class SessionNotFoundError(AuthError):
    """
    No session under this token, or its user is gone or inactive.

    Note: account state is not revealed to the client; callers see the
    same 401 as for an unknown token.
    """


class SessionExpiredError(AuthError):
    """Session has expired and user must re-authenticate."""


class UserNotFoundError(AuthError):
    """No user with this id. Internal use; not surfaced during login."""


class UserInactiveError(AuthError):
    """User account is deactivated. Login not permitted."""


class NotAuthenticatedError(AuthError):
    """Request carries no session token at all."""


class AuthorizationDeniedError(AuthError):
    """Caller is authenticated but lacks admin rights, and debug mode is off."""
