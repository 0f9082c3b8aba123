"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    AuthorizationDeniedError,
    InvalidTelegramAuthError,
    NotAuthenticatedError,
    SessionExpiredError,
    SessionNotFoundError,
    UserInactiveError,
    UserNotFoundError,
)
from auth.types import (
    AuthenticatedUser,
    Session,
    TelegramLoginClaim,
    User,
    UserProfile,
)
from auth.config import AuthConfig
from auth.database import AuthDatabase
from auth.telegram import (
    build_data_check_string,
    compute_telegram_hash,
    validate_telegram_claim,
    verify_telegram_login,
)
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.session import SessionManager
from auth.authorization import AccessPolicy, AuthorizationGate, DebugModeProvider
from auth.csrf import CSRFMiddleware, issue_csrf_token, validate_csrf_token
from auth.service import AuthService
from auth.security_middleware import AuthMiddleware
from auth.dependencies import AdminRequired, optional_user, require_user
from auth.api import create_auth_router
