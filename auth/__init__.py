"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    InvalidCredentialsError,
    InvalidTokenError,
    PermissionDeniedError,
    RateLimitedError,
    UserInactiveError,
    UserAlreadyExistsError,
    WeakPasswordError,
)
from auth.types import (
    Role,
    User,
    StaffMember,
    IssuedToken,
    ADMIN_ROLES,
    SUPPORT_PORTAL_ROLES,
    BANK_PORTAL_ROLES,
)
from auth.config import AuthConfig, OTPConfig
from auth.database import AuthDatabase
from auth.rate_limiter import RateLimiter
from auth.tokens import TokenIssuer, hash_password, verify_password
from auth.service import AuthService
from auth.permissions import require_roles
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router, create_portal_auth_router
